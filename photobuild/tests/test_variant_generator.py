"""Tests for VariantGenerator class."""

import logging

import pytest
from PIL import Image

from photobuild.errors import VariantWriteError
from photobuild.jobs import VariantJob
from photobuild.transform_spec import ResizePolicy, TransformSpec
from photobuild.variant_generator import VariantGenerator


def write_garbage(image, info, path, fmt, quality=None):
    path.write_bytes(b'garbage')


@pytest.fixture
def generator(logger):
    return VariantGenerator(settle_delay=0, logger=logger)


@pytest.fixture
def source(tmp_path, make_image):
    return make_image(tmp_path / 'src' / 'a.jpg', size=(200, 100))


def make_job(source, tmp_path, transform):
    return VariantJob(src=source, file='a.jpg', base=tmp_path / 'out' / 'a', transform=transform)


class TestVariantGenerator:
    """Tests for VariantGenerator class."""

    def test_init_defaults(self):
        """Test default initialization."""
        gen = VariantGenerator()

        assert gen.retry_attempts == 3
        assert gen.settle_delay == 0.03

    def test_generate_writes_variant(self, generator, source, tmp_path, thumb_transform):
        """Test the variant is written next to the mirrored base path."""
        result = generator.generate(make_job(source, tmp_path, thumb_transform))

        output = tmp_path / 'out' / 'a@thumb.webp'
        assert output.exists()
        assert result.resolution == (80, 40)
        assert result.written == 1
        assert result.cached == 0
        with Image.open(output) as img:
            assert img.format == 'WEBP'
            assert img.size == (80, 40)

    def test_generate_all_formats(self, generator, source, tmp_path):
        """Test one file per declared format."""
        transform = TransformSpec(key='large', formats=['webp', 'jpg', 'png'], resize=ResizePolicy(width=100))

        result = generator.generate(make_job(source, tmp_path, transform))

        for fmt in ('webp', 'jpg', 'png'):
            assert (tmp_path / 'out' / f"a@large.{fmt}").exists()
        assert result.resolution == (100, 50)
        assert result.written == 3

    def test_generate_without_resize(self, generator, source, tmp_path):
        """Test a transform without resize keeps the source size."""
        transform = TransformSpec(key='full', formats=['webp'])

        result = generator.generate(make_job(source, tmp_path, transform))

        assert result.resolution == (200, 100)

    def test_generate_cache_hit(self, generator, source, tmp_path, thumb_transform, make_image):
        """Test an existing file is reused and its size reported."""
        make_image(tmp_path / 'out' / 'a@thumb.webp', size=(10, 10), fmt='WEBP')

        result = generator.generate(make_job(source, tmp_path, thumb_transform))

        assert result.written == 0
        assert result.cached == 1
        assert result.resolution == (10, 10)

    def test_generate_is_idempotent(self, generator, source, tmp_path, thumb_transform):
        """Test a second run leaves the file byte-identical."""
        job = make_job(source, tmp_path, thumb_transform)
        generator.generate(job)
        output = tmp_path / 'out' / 'a@thumb.webp'
        first = output.read_bytes()

        result = generator.generate(job)

        assert output.read_bytes() == first
        assert result.written == 0

    def test_corrupt_cached_file_regenerated(self, generator, source, tmp_path, thumb_transform):
        """Test an unreadable cached file is deleted and rewritten."""
        output = tmp_path / 'out' / 'a@thumb.webp'
        output.parent.mkdir(parents=True)
        output.write_bytes(b'garbage')

        result = generator.generate(make_job(source, tmp_path, thumb_transform))

        assert result.retries == 1
        assert result.written == 1
        assert result.resolution == (80, 40)

    def test_retries_are_bounded(self, generator, source, tmp_path, thumb_transform, mocker, caplog):
        """Test regeneration stops after three retries without raising."""
        write = mocker.patch.object(VariantGenerator, 'write', side_effect=write_garbage)

        with caplog.at_level(logging.WARNING, logger='test'):
            result = generator.generate(make_job(source, tmp_path, thumb_transform))

        assert write.call_count == 4
        assert result.retries == 3
        assert result.resolution is None
        assert result.unreadable == ['webp']
        assert 'Can not get metadata' in caplog.text

    def test_custom_retry_attempts(self, source, tmp_path, thumb_transform, mocker, logger):
        """Test retry_attempts=0 gives up after the first read."""
        write = mocker.patch.object(VariantGenerator, 'write', side_effect=write_garbage)
        gen = VariantGenerator(retry_attempts=0, settle_delay=0, logger=logger)

        result = gen.generate(make_job(source, tmp_path, thumb_transform))

        assert write.call_count == 1
        assert result.resolution is None

    def test_first_readable_format_sets_resolution(self, generator, source, tmp_path, mocker):
        """Test a later format supplies the resolution if the first never reads back."""
        real_write = VariantGenerator.write

        def flaky(image, info, path, fmt, quality=None):
            if fmt == 'png':
                write_garbage(image, info, path, fmt)
            else:
                real_write(image.resize((33, 11)), info, path, fmt, quality)

        mocker.patch.object(VariantGenerator, 'write', side_effect=flaky)
        transform = TransformSpec(key='mixed', formats=['png', 'webp'], resize=ResizePolicy(width=100))

        result = generator.generate(make_job(source, tmp_path, transform))

        assert result.resolution == (33, 11)
        assert result.unreadable == ['png']

    def test_later_format_does_not_overwrite(self, generator, source, tmp_path, make_image):
        """Test only the first format's dimensions are recorded."""
        make_image(tmp_path / 'out' / 'a@pair.jpg', size=(7, 7), fmt='JPEG')
        transform = TransformSpec(key='pair', formats=['webp', 'jpg'], resize=ResizePolicy(width=100))

        result = generator.generate(make_job(source, tmp_path, transform))

        assert result.resolution == (100, 50)

    def test_write_failure_raises(self, generator, tmp_path, thumb_transform):
        """Test an unreadable source is reported as VariantWriteError."""
        missing = tmp_path / 'src' / 'missing.jpg'

        with pytest.raises(VariantWriteError) as excinfo:
            generator.generate(make_job(missing, tmp_path, thumb_transform))

        assert str(missing) in str(excinfo.value)
        assert excinfo.value.__cause__ is not None

    def test_write_failure_keeps_earlier_resolution(self, generator, source, tmp_path, mocker):
        """Test a failing later format still reports the size read from the first."""
        real_write = VariantGenerator.write

        def jpg_fails(image, info, path, fmt, quality=None):
            if fmt == 'jpg':
                raise OSError('disk full')
            real_write(image, info, path, fmt, quality)

        mocker.patch.object(VariantGenerator, 'write', side_effect=jpg_fails)
        transform = TransformSpec(key='large', formats=['webp', 'jpg'], resize=ResizePolicy(width=100))

        with pytest.raises(VariantWriteError) as excinfo:
            generator.generate(make_job(source, tmp_path, transform))

        assert excinfo.value.result.resolution == (100, 50)
        assert excinfo.value.result.written == 1
        assert (tmp_path / 'out' / 'a@large.webp').exists()

    def test_keeps_exif(self, generator, tmp_path, thumb_transform):
        """Test EXIF data of the source is written to the variant."""
        img = Image.new('RGB', (200, 100), 'green')
        exif = Image.Exif()
        exif[0x010F] = 'TestCam'
        src = tmp_path / 'src' / 'a.jpg'
        src.parent.mkdir(parents=True)
        img.save(src, exif=exif.tobytes())

        generator.generate(make_job(src, tmp_path, thumb_transform))

        with Image.open(tmp_path / 'out' / 'a@thumb.webp') as out:
            assert out.getexif().get(0x010F) == 'TestCam'
