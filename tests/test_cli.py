"""Tests for the document-check CLI and CSV export."""

import csv
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from staff_onboarding.cli import (
    _find_images,
    _print_summary,
    _write_csv,
    extract_single,
    load_image,
    main,
    process_folder,
)
from staff_onboarding.utils.config import VisionConfig
from staff_onboarding.vision.passport_extraction import PassportExtractionResult
from staff_onboarding.vision.passport_page import (
    PassportPageType,
    PassportPageValidationResult,
)
from staff_onboarding.vision.photo import PhotoValidationResult


def _extraction(**data: str) -> PassportExtractionResult:
    return PassportExtractionResult(success=True, data=data, mrz_verified=True)


class TestFindImages:
    """Tests for image discovery."""

    def test_find_supported(self, tmp_path: Path) -> None:
        (tmp_path / "a.png").touch()
        (tmp_path / "b.jpg").touch()
        (tmp_path / "c.jpeg").touch()
        (tmp_path / "scan.pdf").touch()
        (tmp_path / "readme.txt").touch()
        assert [f.name for f in _find_images(tmp_path)] == ["a.png", "b.jpg", "c.jpeg"]

    def test_find_uppercase_extensions(self, tmp_path: Path) -> None:
        (tmp_path / "PASSPORT.JPG").touch()
        assert len(_find_images(tmp_path)) == 1


class TestLoadImage:
    """Tests for reading local files as data URLs."""

    def test_image_compressed(self, tmp_path: Path, image_factory) -> None:
        path = tmp_path / "p.png"
        path.write_bytes(image_factory((2000, 1000)))
        assert load_image(path, VisionConfig()).startswith("data:image/jpeg;base64,")

    def test_pdf_passed_through(self, tmp_path: Path) -> None:
        path = tmp_path / "p.pdf"
        path.write_bytes(b"%PDF-1.4")
        assert load_image(path, VisionConfig()) == "data:application/pdf;base64,JVBERi0xLjQ="


class TestWriteCsv:
    """Tests for CSV writing."""

    def test_meta_columns_first(self, tmp_path: Path) -> None:
        results = [
            {
                "filename": "a.png",
                "status": "success",
                "mrz_verified": True,
                "error": None,
                "passport_no": "X1",
                "family_name": "Smith",
            }
        ]
        output = tmp_path / "results.csv"
        _write_csv(results, output)

        with open(output) as f:
            headers = next(csv.reader(f))
        assert headers == ["filename", "status", "mrz_verified", "error", "family_name", "passport_no"]

    def test_empty_results(self, tmp_path: Path) -> None:
        output = tmp_path / "results.csv"
        _write_csv([], output)
        assert not output.exists()

    def test_creates_parent_dirs(self, tmp_path: Path) -> None:
        output = tmp_path / "subdir" / "results.csv"
        _write_csv([{"filename": "a.png", "status": "success"}], output)
        assert output.exists()


class TestPrintSummary:
    def test_print_summary(self, capsys: pytest.CaptureFixture[str]) -> None:
        _print_summary({"total": 5, "successful": 4, "failed": 1}, Path("results.csv"))
        out = capsys.readouterr().out
        assert "Total:      5" in out
        assert "Successful: 4" in out
        assert "Failed:     1" in out
        assert "results.csv" in out


class TestProcessFolder:
    """Tests for batch passport extraction."""

    @patch("staff_onboarding.cli.extract_passport")
    def test_success_and_failure(
        self, mock_extract: MagicMock, tmp_path: Path, image_factory
    ) -> None:
        (tmp_path / "a.png").write_bytes(image_factory())
        (tmp_path / "b.png").write_bytes(image_factory())
        mock_extract.side_effect = [
            _extraction(passport_no="X1", family_name="Smith"),
            PassportExtractionResult(success=False, error="Image too blurry"),
        ]
        output_csv = tmp_path / "out" / "results.csv"

        summary = process_folder(tmp_path, output_csv)

        assert summary == {"total": 2, "successful": 1, "failed": 1}
        with open(output_csv) as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["passport_no"] == "X1"
        assert rows[0]["status"] == "success"
        assert rows[1]["error"] == "Image too blurry"

    @patch("staff_onboarding.cli.extract_passport")
    def test_unreadable_file_counted_as_failure(
        self, mock_extract: MagicMock, tmp_path: Path
    ) -> None:
        (tmp_path / "broken.png").write_bytes(b"not an image")
        summary = process_folder(tmp_path, tmp_path / "results.csv")
        assert summary["failed"] == 1
        mock_extract.assert_not_called()

    def test_empty_folder(self, tmp_path: Path) -> None:
        summary = process_folder(tmp_path, tmp_path / "results.csv")
        assert summary["total"] == 0

    @patch("staff_onboarding.cli.extract_passport")
    def test_verbose(
        self,
        mock_extract: MagicMock,
        tmp_path: Path,
        image_factory,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        (tmp_path / "a.png").write_bytes(image_factory())
        mock_extract.return_value = _extraction()
        process_folder(tmp_path, tmp_path / "results.csv", verbose=True)
        assert "Processing [1/1]" in capsys.readouterr().out


class TestSingleCommands:
    """Tests for the photo, page and extract commands."""

    @patch("staff_onboarding.cli.extract_passport")
    def test_extract_single(self, mock_extract: MagicMock, tmp_path: Path, image_factory) -> None:
        path = tmp_path / "p.png"
        path.write_bytes(image_factory())
        mock_extract.return_value = _extraction(passport_no="X1")
        result = extract_single(path)
        assert result["filename"] == "p.png"
        assert result["data"] == {"passport_no": "X1"}

    @patch("staff_onboarding.cli.extract_passport")
    def test_main_extract_to_file(
        self, mock_extract: MagicMock, tmp_path: Path, image_factory
    ) -> None:
        path = tmp_path / "p.png"
        path.write_bytes(image_factory())
        mock_extract.return_value = _extraction(passport_no="X1")
        output = tmp_path / "out.json"

        main(["extract", str(path), "-o", str(output)])

        assert json.loads(output.read_text())["data"]["passport_no"] == "X1"

    @patch("staff_onboarding.cli.validate_photo")
    def test_main_photo(
        self,
        mock_validate: MagicMock,
        tmp_path: Path,
        image_factory,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = tmp_path / "face.jpg"
        path.write_bytes(image_factory(image_format="JPEG"))
        mock_validate.return_value = PhotoValidationResult(True, [], [], 90)

        main(["photo", str(path)])

        out = json.loads(capsys.readouterr().out)
        assert out["valid"] is True
        assert out["filename"] == "face.jpg"

    @patch("staff_onboarding.cli.validate_passport_page")
    def test_main_page_with_expectation(
        self,
        mock_validate: MagicMock,
        tmp_path: Path,
        image_factory,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        path = tmp_path / "cover.png"
        path.write_bytes(image_factory())
        mock_validate.return_value = PassportPageValidationResult(
            PassportPageType.COVER, 90, ""
        )

        main(["page", str(path), "--expect", "INSIDE_PAGES"])

        out = json.loads(capsys.readouterr().out)
        assert out["page_type"] == "COVER"
        assert out["matches"] is False

    def test_main_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["extract", str(tmp_path / "missing.png")])
        assert exc_info.value.code == 1

    def test_main_batch_not_a_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["batch", str(tmp_path / "nope")])
        assert exc_info.value.code == 1

    def test_main_no_command(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
