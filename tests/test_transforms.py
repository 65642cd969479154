"""Tests for frontmatter, tag and link transforms."""

import datetime

import pytest

from ob2static.core.models import FrontmatterError
from ob2static.transforms.frontmatter import build_document, parse_frontmatter
from ob2static.transforms.links import image_tag, post_link
from ob2static.transforms.tags import leaf_segment, normalize_tags


class TestParseFrontmatter:
    """Tests for splitting notes into frontmatter and body."""

    def test_simple_note(self):
        text = "---\ntitle: Hello\npublished: true\n---\nBody text\n"
        frontmatter, body = parse_frontmatter(text)
        assert frontmatter == {"title": "Hello", "published": True}
        assert body == "Body text\n"

    def test_blank_line_after_delimiter_is_consumed(self):
        frontmatter, body = parse_frontmatter("---\na: 1\n---\n\nBody")
        assert frontmatter == {"a": 1}
        assert body == "Body"

    def test_no_frontmatter(self):
        text = "# Title\n\nJust content."
        frontmatter, body = parse_frontmatter(text)
        assert frontmatter is None
        assert body == text

    def test_delimiter_not_at_start(self):
        text = "\n---\npublished: true\n---\nBody"
        frontmatter, body = parse_frontmatter(text)
        assert frontmatter is None
        assert body == text

    def test_empty_block(self):
        frontmatter, body = parse_frontmatter("---\n---\nBody")
        assert frontmatter == {}
        assert body == "Body"

    def test_body_keeps_horizontal_rules(self):
        text = "---\npublished: true\n---\nabove\n\n---\n\nbelow"
        frontmatter, body = parse_frontmatter(text)
        assert frontmatter == {"published": True}
        assert body == "above\n\n---\n\nbelow"

    def test_invalid_yaml(self):
        with pytest.raises(FrontmatterError):
            parse_frontmatter("---\ntitle: [unclosed\n---\nBody")

    def test_non_mapping(self):
        with pytest.raises(FrontmatterError):
            parse_frontmatter("---\n- a\n- b\n---\nBody")

    def test_unterminated(self):
        with pytest.raises(FrontmatterError):
            parse_frontmatter("---\ntitle: Hello\nno closing delimiter")

    def test_windows_line_endings(self):
        frontmatter, body = parse_frontmatter("---\r\ntitle: Hi\r\n---\r\n\r\nBody")
        assert frontmatter == {"title": "Hi"}
        assert body == "Body"


class TestBuildDocument:
    """Tests for serializing posts."""

    def test_layout(self):
        output = build_document({"title": "Hello", "published": True}, "Body")
        assert output == "---\ntitle: Hello\npublished: true\n---\n\nBody"

    def test_preserves_key_order(self):
        output = build_document({"z": 1, "a": 2}, "")
        assert output.index("z: 1") < output.index("a: 2")

    def test_unicode(self):
        output = build_document({"title": "日本語"}, "内容")
        assert "title: 日本語" in output

    def test_round_trip(self):
        frontmatter = {
            "title": "A: tricky # title",
            "published": True,
            "plink": "tricky",
            "tags": ["c", "y"],
            "date": datetime.date(2024, 1, 15),
        }
        article = "First paragraph.\n\n---\n\n[Link](/post/other#sec)\n"
        parsed, body = parse_frontmatter(build_document(frontmatter, article))
        assert parsed == frontmatter
        assert body == article

    def test_round_trip_leading_newline(self):
        parsed, body = parse_frontmatter(build_document({"a": 1}, "\nBody"))
        assert parsed == {"a": 1}
        assert body == "\nBody"


class TestTagTransforms:
    """Tests for tag flattening."""

    def test_leaf_segment(self):
        transform = leaf_segment()
        assert transform("a/b/c") == "c"
        assert transform("solo") == "solo"

    def test_leaf_segment_ignores_outer_separators(self):
        transform = leaf_segment()
        assert transform("a/b/") == "b"
        assert transform("/a") == "a"

    def test_string_tag(self):
        assert normalize_tags({"tags": "a/b/c"}) == {"tags": "c"}

    def test_list_tags(self):
        assert normalize_tags({"tags": ["a/b/c", "x/y"]}) == {"tags": ["c", "y"]}

    def test_flat_tags_unchanged(self):
        assert normalize_tags({"tags": ["solo"]}) == {"tags": ["solo"]}

    def test_no_tags(self):
        frontmatter = {"title": "T"}
        assert normalize_tags(frontmatter) == {"title": "T"}

    def test_non_string_elements_kept(self):
        assert normalize_tags({"tags": ["a/b", 2024]}) == {"tags": ["b", 2024]}

    def test_input_not_mutated(self):
        frontmatter = {"tags": ["a/b"]}
        normalize_tags(frontmatter)
        assert frontmatter == {"tags": ["a/b"]}

    def test_custom_transform(self):
        result = normalize_tags({"tags": ["a.b"]}, leaf_segment("."))
        assert result == {"tags": ["b"]}


class TestLinkTransforms:
    """Tests for link transform factories."""

    def test_post_link(self):
        transform = post_link()
        assert transform("My Note", "my-note") == "[My Note](/post/my-note)"

    def test_post_link_with_anchor(self):
        transform = post_link()
        assert transform("My Note", "my-note#intro") == "[My Note](/post/my-note#intro)"

    def test_post_link_custom_prefix(self):
        transform = post_link("/blog/")
        assert transform("My Note", "my-note") == "[My Note](/blog/my-note)"

    def test_post_link_empty_prefix(self):
        transform = post_link("")
        assert transform("My Note", "my-note") == "[My Note](/my-note)"

    def test_image_tag(self):
        assert image_tag("https://img.example.com/1.png") == "![image](https://img.example.com/1.png)"
