"""
Tests for frame parsing and the serial / synthetic frame sources.
Run from project root: python -m pytest tests/ -v
"""
import sys
import unittest
from pathlib import Path
from unittest import mock

import numpy as np
import serial

# Project root on path so the flat modules import
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import constants
from frame_source import (
    FrameStats,
    SerialFrameSource,
    SyntheticFrameSource,
    open_frame_source,
    parse_frame,
)


def frame_line(values, prefix="T:"):
    return prefix + ",".join(f"{v:.2f}" for v in values)


class FakePort:
    """Stands in for a pyserial port with a queue of pending lines."""
    def __init__(self, lines):
        self.lines = [line.encode('utf-8') + b"\n" for line in lines]
        self.closed = False

    @property
    def in_waiting(self):
        return sum(len(line) for line in self.lines)

    def readline(self):
        return self.lines.pop(0)

    def close(self):
        self.closed = True


class TestParseFrame(unittest.TestCase):

    def test_prefixed_line(self):
        values = [20.0 + i * 0.25 for i in range(64)]
        grid = parse_frame(frame_line(values), 8, 8)
        self.assertEqual(grid.shape, (8, 8))
        self.assertAlmostEqual(grid[0, 1], 20.25)
        self.assertAlmostEqual(grid[1, 0], 22.0)
        self.assertAlmostEqual(grid[7, 7], 35.75)

    def test_plain_line_with_trailing_comma(self):
        grid = parse_frame("1.5, 2.5, 3.5, 4.5,", 2, 2)
        self.assertEqual(grid.tolist(), [[1.5, 2.5], [3.5, 4.5]])

    def test_wrong_cell_count(self):
        self.assertIsNone(parse_frame(frame_line([21.0] * 63), 8, 8))
        self.assertIsNone(parse_frame(frame_line([21.0] * 65), 8, 8))

    def test_garbage(self):
        self.assertIsNone(parse_frame("", 2, 2))
        self.assertIsNone(parse_frame("T:", 2, 2))
        self.assertIsNone(parse_frame("1.0,abc,3.0,4.0", 2, 2))
        self.assertIsNone(parse_frame("1.0,,3.0,4.0", 2, 2))


class TestSerialFrameSource(unittest.TestCase):

    def test_returns_newest_valid_frame(self):
        port = FakePort([
            frame_line([1.0, 2.0, 3.0, 4.0]),
            "T:1.0,2.0",
            frame_line([5.0, 6.0, 7.0, 8.0]),
        ])
        source = SerialFrameSource(port, 2, 2)
        with self.assertLogs(constants.LOGGER_NAME, level='WARNING') as logs:
            grid = source.read()
        self.assertEqual(grid.tolist(), [[5.0, 6.0], [7.0, 8.0]])
        self.assertEqual(source.stats.received, 3)
        self.assertEqual(source.stats.accepted, 2)
        self.assertEqual(source.stats.dropped, 1)
        self.assertIn("Dropped malformed frame", logs.output[0])

    def test_no_pending_data(self):
        source = SerialFrameSource(FakePort([]), 2, 2)
        self.assertIsNone(source.read())
        self.assertEqual(source.stats.received, 0)

    def test_only_malformed_data(self):
        source = SerialFrameSource(FakePort(["T:1,2,3", "noise"]), 2, 2)
        with self.assertLogs(constants.LOGGER_NAME, level='WARNING'):
            self.assertIsNone(source.read())
        self.assertEqual(source.stats.dropped, 2)

    def test_blank_lines_are_skipped(self):
        source = SerialFrameSource(FakePort(["", frame_line([1.0, 2.0, 3.0, 4.0])]), 2, 2)
        self.assertIsNotNone(source.read())
        self.assertEqual(source.stats.received, 1)

    def test_context_manager_closes_port(self):
        port = FakePort([])
        with SerialFrameSource(port, 2, 2):
            pass
        self.assertTrue(port.closed)

    def test_open_uses_pyserial(self):
        with mock.patch('frame_source.serial.Serial') as serial_cls:
            source = SerialFrameSource.open('/dev/ttyUSB0', 115200, 8, 8, timeout=0.5)
        serial_cls.assert_called_once_with('/dev/ttyUSB0', 115200, timeout=0.5)
        serial_cls.return_value.reset_input_buffer.assert_called_once()
        self.assertEqual((source.rows, source.cols), (8, 8))

    def test_open_failure_is_raised(self):
        with mock.patch('frame_source.serial.Serial', side_effect=serial.SerialException("busy")):
            with self.assertLogs(constants.LOGGER_NAME, level='ERROR'):
                with self.assertRaises(serial.SerialException):
                    SerialFrameSource.open('COM4', 115200, 8, 8)


class TestSyntheticFrameSource(unittest.TestCase):

    def test_shape_and_determinism(self):
        a = SyntheticFrameSource(4, 6, np.random.default_rng(42))
        b = SyntheticFrameSource(4, 6, np.random.default_rng(42))
        for _ in range(3):
            grid_a, grid_b = a.read(), b.read()
            self.assertEqual(grid_a.shape, (4, 6))
            self.assertTrue(np.array_equal(grid_a, grid_b))
        self.assertEqual(a.stats.accepted, 3)

    def test_hotspot_is_warmer_than_ambient(self):
        source = SyntheticFrameSource(8, 8, np.random.default_rng(0), ambient=24.0, hotspot=34.0, noise=0.0)
        grid = source.read()
        self.assertGreater(grid.max(), 30.0)
        self.assertGreaterEqual(grid.min(), 24.0)


class TestOpenFrameSource(unittest.TestCase):

    def test_no_port_selects_synthetic(self):
        source = open_frame_source({'serial': {'port': None}}, 8, 8, np.random.default_rng(1))
        self.assertIsInstance(source, SyntheticFrameSource)
        source = open_frame_source({}, 8, 8, np.random.default_rng(1))
        self.assertIsInstance(source, SyntheticFrameSource)

    def test_port_selects_serial(self):
        config = {'serial': {'port': 'COM4', 'baud': 921600, 'timeout': 0.1}}
        with mock.patch('frame_source.serial.Serial') as serial_cls:
            source = open_frame_source(config, 8, 8, np.random.default_rng(1))
        self.assertIsInstance(source, SerialFrameSource)
        serial_cls.assert_called_once_with('COM4', 921600, timeout=0.1)


class TestFrameStats(unittest.TestCase):

    def test_counts(self):
        stats = FrameStats()
        stats.record(True)
        stats.record(False)
        stats.record(True)
        self.assertEqual((stats.received, stats.accepted, stats.dropped), (3, 2, 1))
        self.assertIn("dropped=1", repr(stats))


if __name__ == "__main__":
    unittest.main()
