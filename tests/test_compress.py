import base64
import io
import unittest

from tests._test_path import SRC  # noqa: F401
from tests._fixtures import NoSurfaceProvider, RecordingProvider, close, jpeg_bytes, open_bytes, png_bytes, solid, textured

from passportprint.core.errors import DecodeError, SurfaceUnavailable
from passportprint.export import compress as c
from passportprint.raster.envelope import JPEG_DATA_URL_PREFIX, to_bytes


def _encode_like_surface(img, quality: int) -> bytes:
    buf = io.BytesIO()
    img.convert("RGB").save(buf, format="JPEG", quality=quality, optimize=True)
    return buf.getvalue()


class TestCompressPassthrough(unittest.IsolatedAsyncioTestCase):
    async def test_non_positive_target_returns_input(self):
        src = jpeg_bytes(textured())
        b64 = base64.b64encode(src).decode("ascii")
        url = JPEG_DATA_URL_PREFIX + b64
        for target in (0, -1, -50 * 1024, None):
            self.assertEqual(await c.compress_to_target_size(url, target), url)
            self.assertEqual(await c.compress_to_target_size(b64, target), url)

    async def test_passthrough_does_not_decode(self):
        # Not an image at all; passthrough must not notice.
        out = await c.compress_to_target_size("Zm9v", 0)
        self.assertEqual(out, JPEG_DATA_URL_PREFIX + "Zm9v")


class TestCompressSearch(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.src_img = textured((240, 180))
        self.src = jpeg_bytes(self.src_img, quality=98)
        self.decoded = open_bytes(self.src)
        self.reference = _encode_like_surface(self.decoded, 95)

    async def test_fits_reachable_budget_and_keeps_size(self):
        budget = len(_encode_like_surface(self.decoded, 30))
        out = await c.compress_to_target_size(self.src, budget)

        self.assertTrue(out.startswith(JPEG_DATA_URL_PREFIX))
        data = to_bytes(out)
        self.assertLessEqual(len(data), budget)
        self.assertEqual(open_bytes(data).size, self.decoded.size)

    async def test_unreachable_budget_returns_reference(self):
        out = await c.compress_to_target_size(self.src, 1)
        self.assertEqual(len(to_bytes(out)), len(self.reference))

    async def test_never_larger_than_reference(self):
        for budget in (1, 2000, len(self.reference) // 2, len(self.reference) * 10):
            out = await c.compress_to_target_size(self.src, budget)
            self.assertLessEqual(len(to_bytes(out)), len(self.reference), msg=f"budget={budget}")

    async def test_at_most_seven_encodes_on_one_surface(self):
        for budget in (1, 10_000, 10_000_000):
            provider = RecordingProvider()
            await c.compress_to_target_size(self.src, budget, provider=provider)
            self.assertEqual(len(provider.surfaces), 1)
            self.assertEqual(provider.surfaces[0].encode_count, c.MAX_ITERATIONS + 1)
            self.assertLessEqual(provider.surfaces[0].encode_count, 7)

    async def test_line_wrapped_base64_input(self):
        wrapped = base64.encodebytes(self.src).decode("ascii")
        out = await c.compress_to_target_size(wrapped, 5000)
        self.assertEqual(open_bytes(to_bytes(out)).size, self.decoded.size)

    async def test_surface_unavailable(self):
        with self.assertRaises(SurfaceUnavailable):
            await c.compress_to_target_size(self.src, 10_000, provider=NoSurfaceProvider())

    async def test_bad_input_is_decode_error(self):
        with self.assertRaises(DecodeError):
            await c.compress_to_target_size(b"not an image", 10_000)


class TestEnsureJpeg(unittest.IsolatedAsyncioTestCase):
    async def test_jpeg_passes_through(self):
        src = jpeg_bytes(textured((64, 48)))
        provider = RecordingProvider()
        out = await c.ensure_jpeg(src, provider=provider)
        self.assertEqual(to_bytes(out), src)
        self.assertEqual(provider.surfaces, [])

    async def test_png_is_reencoded_once(self):
        provider = RecordingProvider()
        out = await c.ensure_jpeg(png_bytes(textured((64, 48))), provider=provider)

        self.assertTrue(out.startswith(JPEG_DATA_URL_PREFIX))
        img = open_bytes(to_bytes(out))
        self.assertEqual(img.format, "JPEG")
        self.assertEqual(img.size, (64, 48))
        self.assertEqual(provider.surfaces[0].encode_count, 1)

    async def test_transparent_png_comes_out_white(self):
        out = await c.ensure_jpeg(png_bytes(solid((32, 32), (0, 0, 0, 0), mode="RGBA")))
        self.assertTrue(close(open_bytes(to_bytes(out)).convert("RGB").getpixel((16, 16)), (255, 255, 255)))

    async def test_garbage_is_decode_error(self):
        with self.assertRaises(DecodeError):
            await c.ensure_jpeg(b"not an image")
