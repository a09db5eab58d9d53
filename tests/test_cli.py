import importlib.util
import logging

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from keybake.cli import main


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for k in ("KEYBAKE_CONFIG", "KEYBAKE_PACKAGE", "KEYBAKE_OUTPUT", "KEYBAKE_JOBS", "KEYBAKE_STRICT_LOAD"):
        monkeypatch.delenv(k, raising=False)
    monkeypatch.chdir(tmp_path)


def _import_path(path, name):
    spec = importlib.util.spec_from_file_location(name, path)
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)
    return mod


def test_end_to_end_file_output(tmp_path):
    out = tmp_path / "testkeys.py"
    assert main(["-p", "testkeys", "-o", str(out), "k1:rsa:1024"]) == 0
    src = out.read_text(encoding="utf-8")
    assert src.startswith("# Code generated by keybake. DO NOT EDIT.")
    mod = _import_path(out, "testkeys")
    assert isinstance(mod.k1, rsa.RSAPrivateKey)
    assert mod.k1.key_size == 1024
    sig = mod.k1.sign(b"payload", padding.PKCS1v15(), hashes.SHA256())
    mod.k1.public_key().verify(sig, b"payload", padding.PKCS1v15(), hashes.SHA256())


def test_stdout_output(capsys):
    assert main(["a:rsa:1024", "b:rsa:1024"]) == 0
    out = capsys.readouterr().out
    assert "``testkeys``" in out
    assert out.index("a: rsa") < out.index("b: rsa")


def test_fail_fast_writes_nothing(tmp_path, caplog):
    out = tmp_path / "keys.py"
    with caplog.at_level(logging.ERROR, logger="keybake"):
        rc = main(["-o", str(out), "ok:rsa:2048", "bad:rsa:notanumber"])
    assert rc == 1
    assert not out.exists()
    assert "bad:rsa:notanumber" in caplog.text


@pytest.mark.parametrize(
    "spec,needle",
    [
        ("foo:rsa", "foo:rsa"),
        ("foo:bar:2048", "'bar'"),
        ("foo:rsa:8", "foo:rsa:8"),
    ],
)
def test_errors_exit_nonzero(tmp_path, caplog, spec, needle):
    out = tmp_path / "keys.py"
    with caplog.at_level(logging.ERROR, logger="keybake"):
        assert main(["-o", str(out), spec]) == 1
    assert needle in caplog.text
    assert not out.exists()


def test_no_specs_is_usage_error(capsys):
    with pytest.raises(SystemExit) as ei:
        main([])
    assert ei.value.code == 2
    assert "at least one key spec" in capsys.readouterr().err


def test_bad_jobs_is_usage_error():
    with pytest.raises(SystemExit) as ei:
        main(["-j", "0", "a:rsa:1024"])
    assert ei.value.code == 2


def test_unwritable_output(tmp_path, caplog):
    out = tmp_path / "missing" / "dir" / "keys.py"
    with caplog.at_level(logging.ERROR, logger="keybake"):
        assert main(["-o", str(out), "a:rsa:1024"]) == 1
    assert "cannot write" in caplog.text


def test_specs_and_defaults_from_config(tmp_path):
    (tmp_path / "keybake.yml").write_text(
        "package: fromconfig\noutput: generated.py\nstrict_load: true\nkeys:\n  - only:rsa:1024\n"
    )
    assert main([]) == 0
    src = (tmp_path / "generated.py").read_text(encoding="utf-8")
    assert "``fromconfig``" in src
    assert "only: rsa.RSAPrivateKey" in src
    assert "does not load" in src


def test_cli_flags_override_config(tmp_path):
    (tmp_path / "keybake.yml").write_text("package: fromconfig\noutput: generated.py\nkeys:\n  - x:rsa:1024\n")
    out = tmp_path / "flags.py"
    assert main(["-p", "fromflags", "-o", str(out), "y:rsa:1024"]) == 0
    src = out.read_text(encoding="utf-8")
    assert "``fromflags``" in src
    assert "y: rsa.RSAPrivateKey" in src
    assert "x: rsa" not in src
    assert not (tmp_path / "generated.py").exists()


def test_bad_config_exits_nonzero(tmp_path, caplog):
    (tmp_path / "keybake.yml").write_text("bogus: 1\n")
    with caplog.at_level(logging.ERROR, logger="keybake"):
        assert main(["a:rsa:1024"]) == 1
    assert "bogus" in caplog.text
