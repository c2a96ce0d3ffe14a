"""Unit tests for panel and transcription models."""

import pytest

from voicepanels.models.panels import (
    COMMAND_WORDS,
    Panel,
    PanelBoard,
    START_LISTENING_MESSAGE,
)
from voicepanels.models.transcription import TranscriptionResult


@pytest.mark.unit
class TestPanelBoard:

    def test_initial_state_is_idle(self):
        board = PanelBoard()

        assert board.visible_panels() == list(Panel)
        assert board.button_title == START_LISTENING_MESSAGE

    def test_show_only(self):
        board = PanelBoard()

        board.show_only(Panel.RIGHT)

        assert board.is_visible(Panel.RIGHT)
        assert not board.is_visible(Panel.TOP)
        assert not board.is_visible(Panel.BOTTOM)
        assert not board.is_visible(Panel.LEFT)

    def test_hide_all_then_show_all(self):
        board = PanelBoard()

        board.hide_all()
        assert board.visible_panels() == []

        board.show_all()
        assert board.visible_panels() == list(Panel)

    def test_snapshot_is_keyed_by_command_word(self):
        board = PanelBoard()
        board.show_only(Panel.LEFT)

        assert board.snapshot() == {"top": False, "right": False, "bottom": False, "left": True}


@pytest.mark.unit
class TestPanel:

    def test_command_vocabulary(self):
        assert set(COMMAND_WORDS) == {"top", "bottom", "right", "left"}

    def test_for_command(self):
        assert Panel.for_command("bottom") is Panel.BOTTOM

    def test_for_command_rejects_other_words(self):
        with pytest.raises(ValueError):
            Panel.for_command("Bottom")


@pytest.mark.unit
class TestTranscriptionResult:

    def test_last_segment(self):
        result = TranscriptionResult.from_transcript("go to the top")

        assert result.segments == ["go", "to", "the", "top"]
        assert result.last_segment == "top"

    def test_empty_transcript_has_no_last_segment(self):
        assert TranscriptionResult.from_transcript("   ").last_segment is None
