from uploadgate.services.rest_validator import is_valid_v2_rest_request, is_valid_v4_rest_request

V4_HEADERS = (
    "AWS4-HMAC-SHA256\n20240101T000000Z\n20240101/us-east-1/s3/aws4_request\n"
    "POST\n/file.txt\nuploads=\nhost:storage.example.com\nx-amz-date:20240101T000000Z\n\nhost;x-amz-date\n"
    "UNSIGNED-PAYLOAD"
)


def test_v2_accepts_resource_in_expected_bucket():
    headers = "POST\n\n\n\nx-amz-date:Mon, 01 Jan 2024 00:00:00 GMT\n/mybucket/uploads/file.txt?uploads"

    assert is_valid_v2_rest_request(headers, expected_bucket="mybucket") is True


def test_v2_rejects_other_bucket_and_bare_bucket_path():
    assert is_valid_v2_rest_request("PUT\n\n\n\n/otherbucket/file.txt", expected_bucket="mybucket") is False
    assert is_valid_v2_rest_request("PUT\n\n\n\n/mybucket/", expected_bucket="mybucket") is False


def test_v2_only_checks_the_resource_line():
    headers = "PUT\n\n/mybucket/decoy\n\n/otherbucket/file.txt"

    assert is_valid_v2_rest_request(headers, expected_bucket="mybucket") is False


def test_v2_treats_bucket_name_literally():
    assert is_valid_v2_rest_request("PUT\n\n\n\n/myXbucket/file.txt", expected_bucket="my.bucket") is False


def test_v4_accepts_expected_host_line():
    assert is_valid_v4_rest_request(V4_HEADERS, expected_host="storage.example.com") is True


def test_v4_rejects_foreign_host():
    headers = V4_HEADERS.replace("host:storage.example.com", "host:evil.example.com")

    assert is_valid_v4_rest_request(headers, expected_host="storage.example.com") is False


def test_v4_rejects_host_with_appended_domain():
    headers = V4_HEADERS.replace("host:storage.example.com", "host:storage.example.com.evil.net")

    assert is_valid_v4_rest_request(headers, expected_host="storage.example.com") is False


def test_v4_rejects_when_no_host_is_configured():
    assert is_valid_v4_rest_request(V4_HEADERS, expected_host=None) is False


def test_validators_do_not_raise_on_garbage():
    assert is_valid_v2_rest_request("", expected_bucket="mybucket") is False
    assert is_valid_v4_rest_request("\n\n\r\n", expected_host="storage.example.com") is False


def test_v4_ignores_host_line_outside_canonical_request():
    headers = "AWS4-HMAC-SHA256\nhost:storage.example.com\n20240101/us-east-1/s3/aws4_request\nPOST\n/file.txt"

    assert is_valid_v4_rest_request(headers, expected_host="storage.example.com") is False


def test_v4_requires_sigv4_algorithm_line():
    headers = V4_HEADERS.replace("AWS4-HMAC-SHA256", "AWS4-HMAC-SHA1", 1)

    assert is_valid_v4_rest_request(headers, expected_host="storage.example.com") is False
