import tempfile
import unittest
from pathlib import Path

from quire.contents import (
    check_unique_ids,
    content_id,
    detect_properties,
    extract_title,
    guess_media_type,
    scan_contents,
    with_detected_properties,
    with_stylesheets,
)
from quire.errors import ValidationError
from quire.models import ContentItem

DOC = (
    "<?xml version=\"1.0\" encoding=\"UTF-8\"?>\n"
    "<html xmlns=\"http://www.w3.org/1999/xhtml\"><head><title>{title}</title></head>"
    "<body>{body}</body></html>"
)


class MediaTypeTests(unittest.TestCase):
    def test_guess_media_type(self) -> None:
        self.assertEqual(guess_media_type("a.xhtml"), "application/xhtml+xml")
        self.assertEqual(guess_media_type("a.html", "html"), "application/xhtml+xml")
        self.assertEqual(guess_media_type("a.xhtml#sec"), "application/xhtml+xml")
        self.assertEqual(guess_media_type("images/a.JPG"), "image/jpeg")
        self.assertEqual(guess_media_type("style.css"), "text/css")
        self.assertEqual(guess_media_type("fonts/a.woff2"), "font/woff2")
        self.assertEqual(guess_media_type("blob.bin"), "application/octet-stream")

    def test_content_id(self) -> None:
        self.assertEqual(content_id("images/cover.jpg"), "images-cover-jpg")
        self.assertEqual(content_id("my chap.xhtml"), "my-chap-xhtml")


class InspectionTests(unittest.TestCase):
    def test_detect_properties(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "c.xhtml"
            body = (
                "<math xmlns=\"http://www.w3.org/1998/Math/MathML\"><mi>x</mi></math>"
                "<svg xmlns=\"http://www.w3.org/2000/svg\"/>"
                "<script>var a = 1;</script>"
            )
            path.write_text(DOC.format(title="T", body=body), encoding="utf-8")
            self.assertEqual(detect_properties(path), frozenset({"mathml", "svg", "scripted"}))

    def test_plain_document_has_no_properties(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "c.xhtml"
            path.write_text(DOC.format(title="T", body="<p>x</p>"), encoding="utf-8")
            self.assertEqual(detect_properties(path), frozenset())

    def test_malformed_document_is_tolerated(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "c.xhtml"
            path.write_text("<html><body><p>unclosed", encoding="utf-8")
            with self.assertLogs("quire.contents", level="WARNING"):
                self.assertEqual(detect_properties(path), frozenset())

    def test_extract_title(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "c.xhtml"
            path.write_text(DOC.format(title="", body="<h1>Heading <em>One</em></h1>"), encoding="utf-8")
            self.assertEqual(extract_title(path), "Heading One")

    def test_detected_properties_merge_with_declared(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            (base / "c.xhtml").write_text(
                DOC.format(title="T", body="<svg xmlns=\"http://www.w3.org/2000/svg\"/>"), encoding="utf-8"
            )
            items = [
                ContentItem(id="c", file="c.xhtml", media="application/xhtml+xml", properties=frozenset({"remote-resources"})),
                ContentItem(id="missing", file="missing.xhtml", media="application/xhtml+xml"),
            ]
            result = with_detected_properties(items, base)
            self.assertEqual(result[0].properties, frozenset({"remote-resources", "svg"}))
            self.assertEqual(result[1], items[1])


class ScanTests(unittest.TestCase):
    def test_scan_orders_and_excludes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            (base / "images").mkdir()
            (base / "b.xhtml").write_text(DOC.format(title="B", body=""), encoding="utf-8")
            (base / "a.xhtml").write_text(DOC.format(title="A", body=""), encoding="utf-8")
            (base / "book.xhtml").write_text(DOC.format(title="cover", body=""), encoding="utf-8")
            (base / "images" / "p.png").write_bytes(b"\x89PNG")
            (base / ".hidden").write_text("x", encoding="utf-8")
            (base / "old.epub").write_bytes(b"PK")
            items = scan_contents(base, exclude=["book.xhtml"])
            self.assertEqual([item.file for item in items], ["a.xhtml", "b.xhtml", "images/p.png"])
            self.assertEqual(items[0].id, "a-xhtml")
            self.assertEqual((items[0].title, items[0].level), ("A", 1))
            self.assertIsNone(items[2].level)
            self.assertEqual(items[2].media, "image/png")


class UniqueIdTests(unittest.TestCase):
    def test_duplicate_ids_rejected(self) -> None:
        items = [
            ContentItem(id="a", file="a.xhtml", media="application/xhtml+xml"),
            ContentItem(id="a", file="b.xhtml", media="application/xhtml+xml"),
        ]
        with self.assertRaises(ValidationError):
            check_unique_ids(items)

    def test_fragments_and_missing_ids_ignored(self) -> None:
        check_unique_ids(
            [
                ContentItem(id="a", file="a.xhtml", media="application/xhtml+xml"),
                ContentItem(id="a", file="a.xhtml#s", media="application/xhtml+xml"),
                ContentItem(file="x.css", media="text/css"),
                ContentItem(file="y.css", media="text/css"),
            ]
        )


class StylesheetTests(unittest.TestCase):
    def test_unlisted_stylesheets_are_appended(self) -> None:
        chapter = ContentItem(id="c1", file="c1.xhtml", media="application/xhtml+xml")
        listed = ContentItem(id="base", file="css/base.css", media="text/css")
        items = with_stylesheets([chapter, listed], ["css/base.css", "css/extra.css", "css/extra.css"])
        self.assertEqual([item.file for item in items], ["c1.xhtml", "css/base.css", "css/extra.css"])
        self.assertEqual(items[2].id, "css-extra-css")
        self.assertEqual(items[2].media, "text/css")


if __name__ == "__main__":
    unittest.main()
