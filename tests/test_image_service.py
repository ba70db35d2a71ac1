import pytest
from PIL import Image

from diptych.services.image_service import ImageService


@pytest.fixture
def service():
    return ImageService()


def test_load_png(service, tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (40, 30), (10, 200, 30)).save(path)

    image = service.load_image(path)

    assert (image.width, image.height) == (40, 30)
    assert image.mode == "RGBA"
    assert image.pil_image.getpixel((5, 5)) == (10, 200, 30, 255)
    assert image.path == path
    assert image.size_bytes == path.stat().st_size


def test_load_missing_file(service, tmp_path):
    with pytest.raises(FileNotFoundError):
        service.load_image(tmp_path / "missing.png")


def test_load_not_an_image(service, tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("not really a png", encoding="utf-8")
    with pytest.raises(ValueError):
        service.load_image(path)


def test_save_png_keeps_alpha(service, tmp_path):
    image = Image.new("RGBA", (20, 10), (0, 0, 0, 0))
    out = service.save_image(image, tmp_path / "nested" / "out.png")
    with Image.open(out) as saved:
        assert saved.mode == "RGBA"
        assert saved.getpixel((3, 3))[3] == 0


def test_save_jpeg_flattens_on_background(service, tmp_path):
    image = Image.new("RGBA", (32, 32), (0, 0, 0, 0))
    out = service.save_image(image, tmp_path / "out.jpg", background=(255, 255, 255))
    with Image.open(out) as saved:
        assert saved.mode == "RGB"
        r, g, b = saved.getpixel((16, 16))
        assert min(r, g, b) > 245
