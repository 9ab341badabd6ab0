"""
Tests for the HashiCorp Vault and AWS Secrets Manager providers.

Backend clients are replaced by MagicMock objects; no network access.
"""

import json
from unittest.mock import ANY, MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from hvac.exceptions import Forbidden, InvalidPath

from sargantana.config.errors import SecretNotFoundError, SecretProviderError
from sargantana.config.secrets.aws import AWSConfig, AWSSecretsManagerProvider
from sargantana.config.secrets.vault import VaultConfig, VaultSecretProvider


def vault_client(response):
    client = MagicMock()
    client.read.return_value = response
    return client


def aws_client(secret_string):
    client = MagicMock()
    client.get_secret_value.return_value = {"Name": "myapp", "SecretString": secret_string}
    return client


class TestVaultSecretProvider:
    """Test reading fields from a Vault path."""

    def test_kv_v2_payload(self):
        """Versioned engines nest the fields under a second `data` key."""
        client = vault_client(
            {"data": {"data": {"password": "v2-secret"}, "metadata": {"version": 3}}}
        )
        provider = VaultSecretProvider(client, "secret/data/myapp")

        assert provider.resolve("password") == "v2-secret"
        client.read.assert_called_once_with("secret/data/myapp")

    def test_kv_v1_payload(self):
        client = vault_client({"data": {"password": "v1-secret"}})
        assert VaultSecretProvider(client, "secret/myapp").resolve("password") == "v1-secret"

    def test_missing_key(self):
        client = vault_client({"data": {"data": {"other": "x"}}})

        with pytest.raises(SecretNotFoundError) as exc_info:
            VaultSecretProvider(client, "secret/data/myapp").resolve("password")

        assert "secret 'password' not found in Vault at path 'secret/data/myapp'" in str(exc_info.value)

    def test_non_string_value_is_not_found(self):
        client = vault_client({"data": {"data": {"port": 5432}}})
        with pytest.raises(SecretNotFoundError):
            VaultSecretProvider(client, "secret/data/myapp").resolve("port")

    @pytest.mark.parametrize("response", [None, {}, {"data": {}}, {"data": None}])
    def test_empty_path(self, response):
        with pytest.raises(SecretNotFoundError, match="no secret found at Vault path"):
            VaultSecretProvider(vault_client(response), "secret/data/none").resolve("k")

    def test_invalid_path(self):
        client = MagicMock()
        client.read.side_effect = InvalidPath("no handler for route")

        with pytest.raises(SecretNotFoundError, match="no secret found at Vault path"):
            VaultSecretProvider(client, "secret/data/none").resolve("k")

    def test_backend_failure(self):
        """Authentication and network failures are provider errors."""
        client = MagicMock()
        client.read.side_effect = Forbidden("permission denied")

        with pytest.raises(SecretProviderError) as exc_info:
            VaultSecretProvider(client, "secret/data/myapp").resolve("k")

        assert "failed to read secret from Vault path 'secret/data/myapp'" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, Forbidden)

    def test_unexpected_v2_format(self):
        client = vault_client({"data": {"data": ["not", "a", "map"]}})
        with pytest.raises(SecretProviderError, match="unexpected data format"):
            VaultSecretProvider(client, "secret/data/myapp").resolve("k")

    def test_cleanup(self):
        provider = VaultSecretProvider(vault_client({"data": {"k": "v"}}), "secret/myapp")
        provider.cleanup()

        with pytest.raises(SecretProviderError, match="cleaned up"):
            provider.resolve("k")


class TestVaultConfig:
    """Test the Vault configuration shape."""

    def valid(self, **overrides):
        values = {
            "address": "https://vault.example.com:8200",
            "token": "s.token",
            "path": "secret/data/myapp",
        }
        values.update(overrides)
        return VaultConfig(**values)

    def test_valid(self):
        self.valid().validate_config()

    @pytest.mark.parametrize(
        "field,value,message",
        [
            ("address", "", "Vault address is required"),
            ("token", "", "Vault token is required"),
            ("path", "", "Vault path is required"),
            ("timeout", 0, "Vault timeout must be positive"),
        ],
    )
    def test_invalid(self, field, value, message):
        with pytest.raises(ValueError, match=message):
            self.valid(**{field: value}).validate_config()

    def test_create_client(self):
        with patch("hvac.Client") as mock_hvac_client:
            client = self.valid(namespace="team-a", timeout=5).create_client()

        assert client is mock_hvac_client.return_value
        mock_hvac_client.assert_called_once_with(
            url="https://vault.example.com:8200",
            token="s.token",
            namespace="team-a",
            timeout=5,
        )

    def test_create_client_without_namespace(self):
        with patch("hvac.Client") as mock_hvac_client:
            self.valid().create_client()

        assert mock_hvac_client.call_args.kwargs["namespace"] is None

    @pytest.mark.parametrize("address", ["vault.example.com", "ftp://vault", "https://"])
    def test_create_client_rejects_bad_address(self, address):
        with pytest.raises(ValueError, match="invalid Vault address"):
            self.valid(address=address).create_client()


class TestAWSSecretsManagerProvider:
    """Test reading fields from a Secrets Manager secret."""

    def test_json_secret_field(self):
        client = aws_client(json.dumps({"api_key": "k-123", "user": "svc"}))
        provider = AWSSecretsManagerProvider(client, "myapp/production")

        assert provider.resolve("api_key") == "k-123"
        client.get_secret_value.assert_called_once_with(SecretId="myapp/production")

    def test_plain_text_secret(self):
        """A secret that is not a JSON object is returned whole."""
        provider = AWSSecretsManagerProvider(aws_client("plain-value"), "myapp/token")
        assert provider.resolve("anything") == "plain-value"

    def test_json_scalar_secret(self):
        provider = AWSSecretsManagerProvider(aws_client('"quoted"'), "myapp/token")
        assert provider.resolve("anything") == '"quoted"'

    def test_missing_field(self):
        provider = AWSSecretsManagerProvider(aws_client(json.dumps({"a": "b"})), "myapp")
        with pytest.raises(SecretNotFoundError, match="key 'api_key' not found in AWS secret 'myapp'"):
            provider.resolve("api_key")

    def test_secret_not_found(self):
        client = MagicMock()
        client.get_secret_value.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "missing"}},
            "GetSecretValue",
        )

        with pytest.raises(SecretNotFoundError, match="AWS secret 'myapp' not found"):
            AWSSecretsManagerProvider(client, "myapp").resolve("k")

    def test_access_denied(self):
        client = MagicMock()
        client.get_secret_value.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "denied"}},
            "GetSecretValue",
        )

        with pytest.raises(SecretProviderError) as exc_info:
            AWSSecretsManagerProvider(client, "myapp").resolve("k")

        assert isinstance(exc_info.value.__cause__, ClientError)

    def test_network_failure(self):
        client = MagicMock()
        client.get_secret_value.side_effect = EndpointConnectionError(
            endpoint_url="https://secretsmanager.eu-west-1.amazonaws.com"
        )

        with pytest.raises(SecretProviderError, match="failed to read secret from AWS Secrets Manager"):
            AWSSecretsManagerProvider(client, "myapp").resolve("k")

    def test_binary_secret(self):
        client = MagicMock()
        client.get_secret_value.return_value = {"Name": "myapp", "SecretBinary": b"\x00"}

        with pytest.raises(SecretNotFoundError, match="has no string value"):
            AWSSecretsManagerProvider(client, "myapp").resolve("k")


class TestAWSConfig:
    """Test the AWS Secrets Manager configuration shape."""

    def test_valid_with_default_credentials(self):
        AWSConfig(region="eu-west-1", secret_name="myapp").validate_config()

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"region": ""}, "AWS region is required"),
            ({"secret_name": ""}, "AWS secret name is required"),
            ({"access_key_id": "AKIA"}, "must be set together"),
            ({"secret_access_key": "secret"}, "must be set together"),
            ({"read_timeout": 0}, "AWS timeouts must be positive"),
        ],
    )
    def test_invalid(self, overrides, message):
        values = {"region": "eu-west-1", "secret_name": "myapp", **overrides}
        with pytest.raises(ValueError, match=message):
            AWSConfig(**values).validate_config()

    def test_create_client(self):
        config = AWSConfig(
            region="eu-west-1",
            secret_name="myapp",
            access_key_id="AKIA",
            secret_access_key="secret",
            endpoint="http://localhost:4566",
        )

        with patch("boto3.Session") as mock_session:
            client = config.create_client()

        mock_session.assert_called_once_with(
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
            region_name="eu-west-1",
        )
        mock_session.return_value.client.assert_called_once_with(
            "secretsmanager", endpoint_url="http://localhost:4566", config=ANY
        )
        assert client is mock_session.return_value.client.return_value

    def test_create_client_timeouts(self):
        config = AWSConfig(region="eu-west-1", secret_name="myapp", connect_timeout=2, read_timeout=4)

        with patch("boto3.Session") as mock_session:
            config.create_client()

        botocore_config = mock_session.return_value.client.call_args.kwargs["config"]
        assert botocore_config.connect_timeout == 2
        assert botocore_config.read_timeout == 4
        assert mock_session.call_args.kwargs["aws_access_key_id"] is None
