"""Unit tests for the PanelScreen rendering and key routing."""

import io
import pytest
from rich.console import Console

from voicepanels.models.audio import AudioStats
from voicepanels.models.panels import Panel, RecordingState, STOP_LISTENING_MESSAGE
from voicepanels.ui.panel_screen import PanelScreen


@pytest.fixture
def screen(controller, board, dispatcher):
    console = Console(file=io.StringIO(), width=100, height=40, color_system=None)
    return PanelScreen(controller, board, dispatcher, console=console)


def render(screen) -> str:
    layout = screen.create_layout()
    screen.update_display(layout)
    screen.console.print(layout)
    return screen.console.file.getvalue()


@pytest.mark.unit
class TestPanelScreen:

    def test_idle_screen_shows_every_panel(self, screen):
        output = render(screen)

        for panel in Panel:
            assert panel.value.upper() in output
        assert "Start listening" in output
        assert "IDLE" in output

    def test_hidden_panels_are_not_drawn(self, screen, controller):
        controller.select_panel("left")

        output = render(screen)

        assert "LEFT" in output
        assert "RIGHT" not in output
        assert "BOTTOM" not in output

    def test_space_toggles_listening(self, screen, controller, board):
        assert screen.on_key(" ") is True

        assert controller.state is RecordingState.LISTENING
        assert board.button_title == STOP_LISTENING_MESSAGE
        assert "LISTENING" in render(screen)

    def test_quit_key_stops_loop(self, screen):
        screen.running = True

        assert screen.on_key("q") is False
        assert screen.running is False

    def test_other_keys_are_ignored(self, screen, controller):
        assert screen.on_key("x") is True
        assert controller.state is RecordingState.IDLE

    def test_heard_word_is_shown(self, screen, controller, hear):
        controller.toggle()
        hear("go right")

        output = render(screen)

        assert "Heard: right" in output
        assert "go right" in output

    def test_cleanup_tears_down_listening(self, screen, controller):
        controller.toggle()

        screen.cleanup()

        assert controller.state is RecordingState.IDLE

    def test_header_shows_capture_stats_while_listening(self, screen, controller, mock_audio_capture):
        mock_audio_capture.get_recording_stats.return_value = AudioStats(
            is_running=True,
            duration_seconds=3.2,
            sample_rate=16000,
            chunk_size=1024,
            total_chunks=120,
            peak_level=0.42,
        )
        assert "chunks" not in render(screen)

        controller.toggle()
        output = render(screen)

        assert "Mic 42%" in output
        assert "120 chunks" in output
        assert "3s" in output
