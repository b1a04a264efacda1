import pytest

from haasdeploy.errors import ProvisionError
from haasdeploy.models import DeploymentTarget
from haasdeploy.services.env_file import EnvFileLoader


def test_missing_env_file_returns_none(tmp_path, logger):
    loader = EnvFileLoader(logger=logger, env_dir=str(tmp_path))

    assert loader.load(DeploymentTarget("svc")) is None


def test_env_file_keeps_entries_in_order(tmp_path, logger):
    (tmp_path / ".svc.env").write_text("FOO=bar\nBAZ=qux\n", encoding="utf-8")
    loader = EnvFileLoader(logger=logger, env_dir=str(tmp_path))

    assert loader.load(DeploymentTarget("svc")) == ["FOO=bar", "BAZ=qux"]


def test_env_file_skips_blank_and_comment_lines(tmp_path, logger):
    (tmp_path / ".svc.env").write_text(
        "# database\nDATABASE_URL=postgres://db/app\n\r\nTOKEN=a=b\n",
        encoding="utf-8",
    )
    loader = EnvFileLoader(logger=logger, env_dir=str(tmp_path))

    assert loader.load(DeploymentTarget("svc")) == ["DATABASE_URL=postgres://db/app", "TOKEN=a=b"]


def test_unreadable_env_file_raises_provision_error(tmp_path, logger):
    (tmp_path / ".svc.env").mkdir()
    loader = EnvFileLoader(logger=logger, env_dir=str(tmp_path))

    with pytest.raises(ProvisionError, match="Could not read env file"):
        loader.load(DeploymentTarget("svc"))


def test_env_values_keep_surrounding_whitespace(tmp_path, logger):
    (tmp_path / ".svc.env").write_text("PASSWORD=abc \nGREETING= hi\n", encoding="utf-8")
    loader = EnvFileLoader(logger=logger, env_dir=str(tmp_path))

    assert loader.load(DeploymentTarget("svc")) == ["PASSWORD=abc ", "GREETING= hi"]
