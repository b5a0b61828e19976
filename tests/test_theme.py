from unittest import mock

from src import theme


def test_theme_css_is_bundled():
    assert ".stApp" in theme.load_theme_css()


def test_missing_css_file_reads_empty(tmp_path):
    assert theme.load_theme_css(str(tmp_path / "nope.css")) == ""


def test_set_theme_configures_page_and_injects_css():
    with mock.patch.object(theme.st, "set_page_config") as page_config, \
            mock.patch.object(theme.st, "markdown") as markdown:
        theme.set_theme(page_title="Projects", page_icon="📋")
    assert page_config.call_args[1]["page_title"] == "Projects"
    assert markdown.call_args[0][0].startswith("<style>")
