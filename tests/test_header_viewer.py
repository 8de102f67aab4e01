import numpy as np
import pytest
from PIL import Image

from img2header.header import ElementType, HeaderSpec, render, write_header
from img2header.header_viewer import (
    header_to_image_array,
    load_c_array_header,
    main,
    parse_header,
    save_image,
)
from img2header.image_converter import image_to_pixels


def make_image():
    img = Image.new('RGB', (3, 2))
    for x in range(3):
        for y in range(2):
            img.putpixel((x, y), (x * 50, y * 100, 200))
    return img


def write_image_header(path, img, column_major=False, write_hex=False):
    pixels = image_to_pixels(img, column_major=column_major)
    spec = HeaderSpec(output_path=str(path), width=pixels.width, height=pixels.height,
                      channels=pixels.channels, write_hex=write_hex)
    write_header(spec, pixels.data)


@pytest.mark.parametrize('write_hex', [False, True])
@pytest.mark.parametrize('column_major', [False, True])
def test_header_back_to_image(tmp_path, write_hex, column_major):
    img = make_image()
    path = tmp_path / 'img.h'
    write_image_header(path, img, column_major=column_major, write_hex=write_hex)
    defines, values = load_c_array_header(path)
    arr = header_to_image_array(defines, values, column_major=column_major)
    np.testing.assert_array_equal(arr, np.asarray(img))


def test_negative_decimal_values():
    spec = HeaderSpec(output_path='img.h', width=1, height=1, channels=3, data_type='int8_t',
                      element_type=ElementType.INT8)
    _, values = parse_header(render(spec, np.array([-5, -100, 7], dtype=np.int8)).text)
    assert values.tolist() == [-5, -100, 7]


def test_missing_defines():
    with pytest.raises(ValueError, match='WIDTH'):
        parse_header('#define HEIGHT 1\n#define CHANNELS 1\n#define SIZE 1\nuint8_t data[SIZE] = {\n1, \n};\n')


def test_missing_array():
    with pytest.raises(ValueError, match='No array'):
        parse_header('#define WIDTH 1\n#define HEIGHT 1\n#define CHANNELS 1\n#define SIZE 1\n')


def test_size_mismatch():
    text = ('#define WIDTH 1\n#define HEIGHT 2\n#define CHANNELS 1\n#define SIZE 2\n'
            'uint8_t data[SIZE] = {\n1, \n};\n')
    with pytest.raises(ValueError, match='size mismatch'):
        parse_header(text)


def test_save_image_roundtrip(tmp_path):
    img = make_image()
    out = tmp_path / 'out.png'
    save_image(np.asarray(img).astype(np.int64), out)
    with Image.open(out) as saved:
        np.testing.assert_array_equal(np.asarray(saved.convert('RGB')), np.asarray(img))


def test_save_grayscale_image(tmp_path):
    out = tmp_path / 'gray.png'
    save_image(np.full((2, 3, 1), 300, dtype=np.int64), out)
    with Image.open(out) as saved:
        assert saved.mode == 'L'
        assert saved.size == (3, 2)
        assert np.asarray(saved).tolist() == [[255] * 3] * 2


def test_save_image_rejects_two_channels(tmp_path):
    with pytest.raises(ValueError):
        save_image(np.zeros((2, 2, 2), dtype=np.int64), tmp_path / 'out.png')


def test_main_save(tmp_path, capsys):
    header = tmp_path / 'img.h'
    write_image_header(header, make_image())
    out = tmp_path / 'img.png'
    assert main([str(header), '--save', str(out)]) == 0
    assert out.exists()
    assert f'Image written to {out}' in capsys.readouterr().out


def test_main_bad_header(tmp_path, capsys):
    header = tmp_path / 'bad.h'
    header.write_text('nothing here\n')
    assert main([str(header), '--save', str(tmp_path / 'x.png')]) == 1
    assert 'Error:' in capsys.readouterr().err
