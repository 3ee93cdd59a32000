import base64
import time
import unittest
from unittest.mock import patch

from tests._test_path import SRC  # noqa: F401
from tests._fixtures import jpeg_bytes, png_bytes, solid

from passportprint.core.errors import DecodeError, DecodeTimeout
from passportprint.raster import decode


class TestLoadRaster(unittest.IsolatedAsyncioTestCase):
    async def test_decodes_data_url_and_raw_base64(self):
        data = jpeg_bytes(solid((40, 30)))
        b64 = base64.b64encode(data).decode("ascii")

        img = await decode.load_raster("data:image/jpeg;base64," + b64)
        self.assertEqual(img.size, (40, 30))
        self.assertEqual(img.mode, "RGB")

        img2 = await decode.load_raster(b64)
        self.assertEqual(img2.size, (40, 30))

    async def test_keeps_alpha(self):
        img = await decode.load_raster(png_bytes(solid((8, 8), (0, 0, 0, 0), mode="RGBA")))
        self.assertEqual(img.mode, "RGBA")

    async def test_garbage_is_decode_error(self):
        with self.assertRaises(DecodeError):
            await decode.load_raster(b"definitely not an image")

    async def test_empty_payload_is_decode_error(self):
        with self.assertRaises(DecodeError):
            await decode.load_raster("")

    async def test_slow_decode_times_out(self):
        def slow(_payload):
            time.sleep(0.5)
            return solid()

        with patch.object(decode, "_decode_image", new=slow):
            with self.assertRaises(DecodeTimeout):
                await decode.load_raster(jpeg_bytes(solid()), timeout=0.05)
