from fractal_flame import create_canvas
from fractal_flame.device import select_device
from fractal_flame.pipeline import apply_tone_mapping, default_stages


def test_select_device_names_a_tensorflow_device():
    assert select_device() in {"/CPU:0", "/GPU:0"}


def test_tone_mapping_runs_on_selected_device():
    canvas = create_canvas(6, 4)
    canvas.counts[0, 0] = 2
    apply_tone_mapping(canvas, default_stages(2.2, select_device()), 2)
    assert canvas.brightness[0, 0] == 1.0
