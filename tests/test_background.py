import numpy as np
import pytest

from layerscene.background import BackgroundImage, BackgroundLayer, PlaneBackgroundLayer
from layerscene.layers import LayerType, ViewPort


def _image(channels, width=4, height=3):
    return BackgroundImage.from_array(np.zeros((height, width, channels), dtype=np.uint8))


def test_default_quad_covers_clip_space():
    layer = BackgroundLayer()
    assert layer.type is LayerType.BACKGROUND
    expected = np.array(
        [
            [1, 1, 1, 1, 1],
            [1, -1, 1, 1, 0],
            [-1, -1, 1, 0, 0],
            [-1, 1, 1, 0, 1],
        ],
        dtype=np.float32,
    )
    np.testing.assert_array_equal(layer.quad, expected)
    assert layer.indices.tolist() == [0, 1, 3, 1, 2, 3]


def test_plane_quad_uses_half_size_and_depth():
    layer = PlaneBackgroundLayer(4.0, 2.0, 5.0)
    quad = layer.quad
    assert np.all(np.abs(quad[:, 0]) == 2.0)
    assert np.all(np.abs(quad[:, 1]) == 1.0)
    assert np.all(quad[:, 2] == 5.0)
    assert layer.shader == "texture3d"


def test_draw_single_call_with_texture_units():
    layer = BackgroundLayer()
    (call,) = layer.draw()
    assert call.shader == "texture"
    assert call.vertex_count == 6
    assert call.uniforms == {"image": 0, "mask": 1}
    np.testing.assert_array_equal(call.vertices, layer.quad[[0, 1, 3, 1, 2, 3]])


@pytest.mark.parametrize("channels, fmt", [(3, "RGB"), (4, "RGBA")])
def test_update_data_selects_format(channels, fmt):
    layer = BackgroundLayer()
    image = _image(channels)
    layer.update_data(image)
    assert layer.texture["format"] == fmt
    assert layer.texture["image"] is image
    assert layer.draw()[0].textures[0]["image"] is image


def test_update_data_without_data_keeps_texture():
    layer = BackgroundLayer()
    image = _image(3)
    layer.update_data(image)
    layer.update_data(BackgroundImage())
    assert layer.texture["image"] is image


def test_update_mask_requires_single_channel():
    layer = BackgroundLayer()
    with pytest.raises(ValueError):
        layer.update_mask(_image(3))


def test_update_mask_stores_red_texture():
    layer = BackgroundLayer()
    mask = _image(1)
    layer.update_mask(mask)
    assert layer.mask["format"] == "RED"
    assert layer.mask["image"] is mask
    assert layer.mask["unit"] == 1


def test_image_size_mismatch_raises():
    with pytest.raises(ValueError):
        BackgroundImage(np.zeros(10, dtype=np.uint8), 4, 3, 3)


def test_image_pixels_round_trip():
    array = np.arange(24, dtype=np.uint8).reshape(2, 4, 3)
    image = BackgroundImage.from_array(array)
    assert (image.width, image.height, image.channels) == (4, 2, 3)
    np.testing.assert_array_equal(image.pixels, array)


def test_plain_background_ignores_model():
    layer = BackgroundLayer()
    layer.set_model(np.eye(4) * 2)
    assert "model" not in layer.draw()[0].uniforms


def test_plane_draw_combines_global_and_model():
    layer = PlaneBackgroundLayer(2.0, 2.0, 1.0)
    model = np.eye(4)
    model[:3, 3] = (1.0, 2.0, 3.0)
    glob = np.eye(4)
    glob[0, 3] = 5.0
    view = np.diag([1.0, -1.0, -1.0, 1.0])
    layer.set_model(model)
    layer.set_global(glob)
    layer.set_view(view)
    uniforms = layer.draw()[0].uniforms
    np.testing.assert_allclose(uniforms["model"], glob @ model)
    np.testing.assert_allclose(uniforms["view"], view)
    assert uniforms["image"] == 0


def test_plane_rejects_bad_matrix():
    layer = PlaneBackgroundLayer(2.0, 2.0, 1.0)
    with pytest.raises(ValueError):
        layer.set_projection(np.eye(3))


def test_render_attaches_viewport():
    layer = BackgroundLayer()
    port = ViewPort(0, 0, 640, 480)
    calls = layer.render(port)
    assert len(calls) == 1
    assert calls[0].viewport == port