"""Tests for prompt parsing."""

from melody.utils.parsers import parse_command, split_args


class TestParseCommand:
    """Tests for parse_command."""

    def test_command_lowercased(self) -> None:
        """Command names are case-insensitive; arguments are not."""
        assert parse_command("OPEN Song.mp3") == ("open", ["Song.mp3"])

    def test_quoted_path(self) -> None:
        """Quoted arguments keep their spaces."""
        assert parse_command('open "~/Music/My Song.mp3"') == ("open", ["~/Music/My Song.mp3"])

    def test_empty(self) -> None:
        """Blank input yields an empty command."""
        assert parse_command("   ") == ("", [])


class TestSplitArgs:
    """Tests for split_args."""

    def test_unbalanced_quote_falls_back(self) -> None:
        """A stray quote does not raise."""
        assert split_args("open it's.mp3") == ["open", "it's.mp3"]
