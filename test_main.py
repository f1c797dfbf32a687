"""명령행 실행 테스트 — 잘못된 옵션은 예외 대신 종료 코드로 끝난다."""

import asyncio

import pytest

from config import load_config
from main import parse_args, run


@pytest.mark.parametrize("value", ["0", "1.5", "-0.2", "high"])
def test_quality_out_of_range_is_a_usage_error(value):
    with pytest.raises(SystemExit) as exc:
        parse_args(["photo.png", "--format", "jpeg", "--quality", value])
    assert exc.value.code == 2


def test_quality_in_range_is_accepted():
    args = parse_args(["photo.png", "--format", "webp", "--quality", "0.5"])
    assert args.quality == 0.5


def test_bad_export_config_returns_error_code(tmp_path):
    config = load_config(tmp_path / "missing.json")
    config["export"]["format"] = "jpg"
    args = parse_args([str(tmp_path / "photo.png")])
    assert asyncio.run(run(args, config)) == 1


def test_bad_backdrop_config_returns_error_code(tmp_path):
    config = load_config(tmp_path / "missing.json")
    config["backdrop"]["mode"] = "sparkle"
    args = parse_args([str(tmp_path / "photo.png")])
    assert asyncio.run(run(args, config)) == 1
