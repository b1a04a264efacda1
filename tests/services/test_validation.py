import pytest

from haasdeploy.errors import DeployError
from haasdeploy.services.validation import ValidationService


@pytest.mark.parametrize("name", ["svc", "my-app", "api_v2", "web.1"])
def test_valid_names_are_accepted(name):
    ValidationService().validate_name(name)


@pytest.mark.parametrize("name", ["", "-svc", "my app", "svc/next", "../etc"])
def test_invalid_names_are_rejected(name):
    with pytest.raises(DeployError, match="Invalid deployment name"):
        ValidationService().validate_name(name)


def test_image_with_whitespace_is_rejected():
    with pytest.raises(DeployError, match="Invalid image reference"):
        ValidationService().validate_image("app: v2")


@pytest.mark.parametrize("port", [0, 65536, -1])
def test_out_of_range_ports_are_rejected(port):
    with pytest.raises(DeployError, match="Invalid port"):
        ValidationService().validate_port(port)


def test_proxy_url_must_be_http():
    service = ValidationService()

    service.validate_proxy_url("http://localhost:2019")
    with pytest.raises(DeployError, match="Invalid proxy admin URL"):
        service.validate_proxy_url("localhost:2019")
