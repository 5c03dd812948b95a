import PIL.Image
import pytest

import flame
from fractal_flame import InvalidDimensions
from fractal_flame.errors import WorkerTimeout


def _parse(*args):
    parser = flame.build_parser()
    return parser, parser.parse_args(list(args))


def test_default_output_path():
    parser, opt = _parse()
    output = flame.resolve_output_config(opt, parser)
    assert output.path.name == "FractalFlame.png"


def test_output_suffix_is_added_from_format(tmp_path):
    parser, opt = _parse("--format", "jpg", "--output", str(tmp_path / "flame"))
    output = flame.resolve_output_config(opt, parser)
    assert output.path.name == "flame.jpg"


def test_output_suffix_must_match_format(tmp_path):
    parser, opt = _parse("--format", "png", "--output", str(tmp_path / "flame.bmp"))
    with pytest.raises(SystemExit):
        flame.resolve_output_config(opt, parser)


@pytest.mark.parametrize(
    "args",
    [
        ("--width", "0"),
        ("--width", "1921"),
        ("--height", "1081"),
        ("--samples", "10000001"),
        ("--threads", "13"),
        ("--warmup", "-1"),
        ("--transformation", "unknown"),
    ],
)
def test_out_of_range_options_are_rejected(args):
    parser, opt = _parse(*args)
    output = flame.resolve_output_config(opt, parser)
    with pytest.raises(SystemExit):
        flame.resolve_flame_config(opt, parser, output, "/CPU:0")


def test_flame_config_from_options():
    parser, opt = _parse(
        "--width", "64", "--height", "32", "--samples", "500", "--threads", "3",
        "--transformation", "disc", "--transformation", "swirl", "--seed", "4",
    )
    output = flame.resolve_output_config(opt, parser)
    config = flame.resolve_flame_config(opt, parser, output, "/CPU:0")
    assert (config.width, config.height, config.samples, config.threads) == (64, 32, 500, 3)
    assert [t.name for t in config.transformations] == ["disc", "swirl"]
    assert config.seed == 4
    assert config.output == output.path


def test_main_writes_image(tmp_path):
    target = tmp_path / "out.png"
    status = flame.main([
        "--width", "40", "--height", "30", "--samples", "3000", "--threads", "2",
        "--transformation", "heart", "--transformation", "sinusoidal",
        "--seed", "1", "--output", str(target),
    ])
    assert status == 0
    with PIL.Image.open(target) as image:
        assert image.size == (40, 30)
        assert image.mode == "L"


def test_main_writes_nothing_when_a_stage_fails(tmp_path, monkeypatch):
    def fail(config):
        raise WorkerTimeout("render", config.timeout)

    monkeypatch.setattr(flame, "run_pipeline", fail)
    target = tmp_path / "out.png"
    status = flame.main(["--width", "10", "--height", "10", "--samples", "10", "--output", str(target)])
    assert status == 1
    assert not target.exists()


def test_main_reports_configuration_errors(tmp_path, monkeypatch):
    def fail(config):
        raise InvalidDimensions("bad world")

    monkeypatch.setattr(flame, "run_pipeline", fail)
    assert flame.main(["--output", str(tmp_path / "x.png")]) == 1


def test_list_transformations(capsys):
    assert flame.main(["--list-transformations"]) == 0
    listed = capsys.readouterr().out.split()
    assert "heart" in listed and "swirl" in listed
