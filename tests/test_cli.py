"""
Tests for the command line entry point.

Run with:
    python -m pytest tests/test_cli.py -v
"""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from satnow import cli, config
from satnow.errors import FetchError, StoreError
from samples import FakePropagator, ISS_TEXT, VANGUARD_TEXT


def fake_fetch(url):
    if url == "https://example.com/vanguard.txt":
        return VANGUARD_TEXT.encode()
    raise FetchError(f"{url}: 404 Not Found")


class TestArguments(unittest.TestCase):

    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        self.assertEqual((args.lat, args.lon, args.alt), (0.0, 0.0, 0.0))
        self.assertFalse(args.gui)
        self.assertLess(args.refresh, 0)
        self.assertIsNone(args.update)

    def test_short_flags(self):
        args = cli.build_parser().parse_args(["-g", "-r", "1000", "-d", "x.sql3", "-u", "s.txt", "-v"])
        self.assertTrue(args.gui)
        self.assertEqual(args.refresh, 1000)
        self.assertEqual(args.db, "x.sql3")
        self.assertEqual(args.update, "s.txt")
        self.assertTrue(args.verbose)

    def test_observer_short_flags(self):
        args = cli.build_parser().parse_args(["-x", "51.5", "-y", "-0.1", "-a", "35"])
        self.assertEqual((args.lat, args.lon, args.alt), (51.5, -0.1, 35.0))

    def test_refresh_default_from_environment(self):
        with mock.patch.object(config, "DEFAULT_REFRESH_MS", "2500"):
            self.assertEqual(cli.build_parser().parse_args([]).refresh, 2500)

    def test_bad_refresh_default_is_a_usage_error(self):
        with mock.patch.object(config, "DEFAULT_REFRESH_MS", "soon"), redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.build_parser().parse_args([])
        self.assertEqual(ctx.exception.code, 2)


class TestMain(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db = os.path.join(self.tmp.name, "satnow.sql3")

    def tearDown(self):
        self.tmp.cleanup()

    def run_main(self, argv, **kwargs):
        out = io.StringIO()
        with redirect_stdout(out):
            status = cli.main(argv, propagator=FakePropagator(), **kwargs)
        return status, out.getvalue().splitlines()

    def test_invalid_latitude_touches_nothing(self):
        with mock.patch("satnow.cli.RecordStore.open") as open_store:
            status, lines = self.run_main(["--lat", "999", "--db", self.db])
        self.assertEqual(status, 1)
        self.assertEqual(lines, [])
        open_store.assert_not_called()
        self.assertFalse(os.path.exists(self.db))

    def test_empty_db_path(self):
        status, _ = self.run_main(["--db", ""])
        self.assertEqual(status, 1)

    def test_unopenable_store(self):
        status, _ = self.run_main(["--db", self.tmp.name])
        self.assertEqual(status, 1)

    def test_store_error_during_update(self):
        sources = os.path.join(self.tmp.name, "sources.txt")
        with open(sources, "w", encoding="utf-8") as f:
            f.write("https://example.com/vanguard.txt\n")

        with mock.patch("satnow.store.RecordStore.upsert", side_effect=StoreError("database is locked")):
            status, lines = self.run_main(["--lat", "1", "-d", self.db, "-u", sources], fetch=fake_fetch)

        self.assertEqual(status, 1)
        self.assertEqual(lines, [])

    def test_empty_store_prints_nothing(self):
        status, lines = self.run_main(["--db", self.db])
        self.assertEqual(status, 0)
        self.assertEqual(lines, [])

    def test_update_then_list(self):
        iss = os.path.join(self.tmp.name, "iss.txt")
        with open(iss, "w", encoding="utf-8") as f:
            f.write(ISS_TEXT)
        sources = os.path.join(self.tmp.name, "sources.txt")
        with open(sources, "w", encoding="utf-8") as f:
            f.write(f"# stations\n{iss}\nhttps://example.com/vanguard.txt\nhttps://example.com/missing.txt\n")

        status, lines = self.run_main(
            ["--lat", "40.7", "--lon", "-74.0", "--db", self.db, "-u", sources],
            fetch=fake_fetch,
        )

        self.assertEqual(status, 0)
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("[+] [1/2] ("))
        self.assertTrue(any("(ISS (ZARYA))" in line for line in lines))
        self.assertTrue(any("(VANGUARD 1)" in line for line in lines))

        # the store keeps the records for the next run
        status, lines = self.run_main(["--db", self.db])
        self.assertEqual(status, 0)
        self.assertEqual(len(lines), 2)

    def test_gui_uses_interactive_display(self):
        with mock.patch("satnow.cli.InteractiveDisplay") as display:
            status, lines = self.run_main(["--db", self.db, "-g", "-r", "250"])
        self.assertEqual(status, 0)
        display.assert_called_once_with(250)
        display.return_value.render.assert_called_once()
        self.assertEqual(lines, [])


if __name__ == "__main__":
    unittest.main()
