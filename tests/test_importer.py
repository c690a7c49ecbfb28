"""Tests for the trip importer."""
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from family_trip.services.extraction_client import DocumentExtractionClient, ExtractionError
from family_trip.services.importer import ImportStatus, TripImporter, guess_mime_type
from family_trip.services.trip_store import LocalTripStorage, TripStore


@pytest_asyncio.fixture
async def store(tmp_path):
    store = TripStore(local=LocalTripStorage(directory=tmp_path / "store", key="trip"))
    await store.load()
    return store


@pytest.fixture
def client():
    return AsyncMock(spec=DocumentExtractionClient)


@pytest.fixture
def importer(store, client):
    return TripImporter(store, client=client)


class TestTextImport:

    @pytest.mark.asyncio
    async def test_empty_text(self, importer, store):
        """Test that blank input is refused without touching the trip."""
        before = store.record

        result = importer.import_text("   \n ")

        assert result.status == ImportStatus.ERROR
        assert result.message == "Paste or type some text first."
        assert store.record is before

    @pytest.mark.asyncio
    async def test_text_without_trip_data(self, importer, store):
        """Test that text with no dates or flights leaves the trip alone."""
        before = store.record

        result = importer.import_text("Can't wait to see everyone!")

        assert result.status == ImportStatus.DONE
        assert result.message.startswith("No trip dates or flight info was detected")
        assert store.record is before

    @pytest.mark.asyncio
    async def test_dates_and_flights_merged(self, importer, store):
        """Test that found dates and flights are merged into the store."""
        result = importer.import_text(
            "Trip 2026-07-10 to 2026-07-30\nNoah and Cori flight UA 88 arrives ATH 9:00 AM"
        )

        assert result.status == ImportStatus.DONE
        assert result.message == "Trip data updated from pasted text. Check Schedule and Travel."
        assert store.record.trip_start_date == "2026-07-10"
        assert store.record.trip_end_date == "2026-07-30"
        assert "UA 88" in store.record.flights["noah-cori"][0].airline

    @pytest.mark.asyncio
    async def test_html_is_stripped(self, importer, store):
        """Test that markup is removed before parsing."""
        importer.import_text("<p>Dates: <b>2026-07-11</b></p>")

        assert store.record.trip_start_date == "2026-07-11"


class TestDocumentImport:

    @pytest.mark.asyncio
    async def test_pdf_merged(self, importer, store, client):
        """Test that a PDF result is merged into the store."""
        client.extract.return_value = {"gettingAround": "Rental car in Crete"}

        result = await importer.import_document(b"%PDF", "application/pdf", "plan.pdf")

        client.extract.assert_awaited_once_with(b"%PDF", "application/pdf", "plan.pdf")
        assert result.status == ImportStatus.DONE
        assert result.message == "Trip data updated from PDF. Check Schedule and Travel."
        assert store.record.getting_around == "Rental car in Crete"

    @pytest.mark.asyncio
    async def test_pdf_failure_leaves_trip(self, importer, store, client):
        """Test that a failed PDF import suggests pasting and changes nothing."""
        client.extract.side_effect = ExtractionError("No text could be extracted from the PDF.")
        before = store.record

        result = await importer.import_document(b"%PDF", "application/pdf", "plan.pdf")

        assert result.status == ImportStatus.ERROR
        assert result.message.startswith("PDF could not be read: No text could be extracted")
        assert result.message.endswith("import it as text.")
        assert store.record is before

    @pytest.mark.asyncio
    async def test_image_kept_and_merged(self, importer, store, client):
        """Test that an image is stored and its text merged."""
        client.extract.return_value = {"importantNumbers": "Hotel +30 22860"}

        result = await importer.import_document(b"\x89PNG", "image/png", "card.png")

        client.extract.assert_awaited_once_with(b"\x89PNG", "image/png", "card.png")
        assert result.status == ImportStatus.DONE
        assert result.message.startswith('Added "card.png" and updated trip data')
        assert [image.name for image in store.record.imported_images] == ["card.png"]
        assert store.record.important_numbers == "Hotel +30 22860"

    @pytest.mark.asyncio
    async def test_image_kept_when_ocr_fails(self, importer, store, client):
        """Test that the image is kept even when OCR fails."""
        client.extract.side_effect = ExtractionError("OCR failed.")

        result = await importer.import_document(b"jpegdata", "image/jpeg", "boarding.jpg")

        assert result.status == ImportStatus.DONE
        assert result.message == (
            'Added "boarding.jpg" to imported images, but no trip data was extracted: OCR failed.'
        )
        assert store.record.imported_images[0].name == "boarding.jpg"
        assert store.record.imported_images[0].base64 == "anBlZ2RhdGE="

    @pytest.mark.asyncio
    async def test_images_accumulate(self, importer, store, client):
        """Test that each imported image is appended."""
        client.extract.side_effect = ExtractionError("OCR failed.")

        await importer.import_document(b"a", "image/jpeg", "one.jpg")
        await importer.import_document(b"b", "image/jpeg", "two.jpg")

        assert [image.name for image in store.record.imported_images] == ["one.jpg", "two.jpg"]

    @pytest.mark.asyncio
    async def test_unsupported_type(self, importer, client):
        """Test that unsupported documents never reach the server."""
        result = await importer.import_document(b"PK", "application/zip", "trip.zip")

        assert result.status == ImportStatus.ERROR
        assert result.message == "Please choose a PDF or image (JPEG/PNG)."
        client.extract.assert_not_awaited()


class TestFileImport:

    @pytest.mark.asyncio
    async def test_text_file(self, importer, store, tmp_path):
        """Test that text files go through the text heuristics."""
        path = tmp_path / "notes.txt"
        path.write_text("Arrive 2026-07-12", encoding="utf-8")

        result = await importer.import_file(path)

        assert result.status == ImportStatus.DONE
        assert store.record.trip_start_date == "2026-07-12"

    @pytest.mark.asyncio
    async def test_pdf_file_goes_to_server(self, importer, client, tmp_path):
        """Test that PDF files are sent for extraction."""
        client.extract.return_value = {"tripEndDate": "2026-08-01"}
        path = tmp_path / "itinerary.pdf"
        path.write_bytes(b"%PDF-1.4")

        await importer.import_file(path)

        client.extract.assert_awaited_once_with(b"%PDF-1.4", "application/pdf", "itinerary.pdf")

    @pytest.mark.asyncio
    async def test_missing_file(self, importer, tmp_path):
        """Test that an unreadable path gives an input error."""
        result = await importer.import_file(tmp_path / "nope.txt")

        assert result.status == ImportStatus.ERROR
        assert result.message == "Could not read file."

    @pytest.mark.asyncio
    async def test_unsupported_file_type(self, importer, tmp_path):
        """Test that binary files of other types are refused."""
        path = tmp_path / "setup.exe"
        path.write_bytes(b"MZ")

        result = await importer.import_file(path)

        assert result.status == ImportStatus.ERROR
        assert result.message == "Please choose a PDF, image (JPEG/PNG) or text file."

    @pytest.mark.asyncio
    async def test_undecodable_text(self, importer, tmp_path):
        """Test that a text file that is not UTF-8 is refused."""
        path = tmp_path / "notes.txt"
        path.write_bytes(b"\xff\xfe\xfa")

        result = await importer.import_file(path)

        assert result.status == ImportStatus.ERROR
        assert result.message.startswith("Could not read that file as text.")


class TestMimeGuess:

    @pytest.mark.parametrize("name,expected", [
        ("plan.pdf", "application/pdf"),
        ("photo.JPG", "image/jpeg"),
        ("scan.png", "image/png"),
        ("notes.txt", "text/plain"),
        ("README", ""),
    ])
    def test_guess(self, name, expected):
        """Test that mime types are guessed from file names."""
        assert guess_mime_type(name) == expected
