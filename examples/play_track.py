"""Example: Play a WAV file with a console position display."""

import sys
import time
from pathlib import Path

from trackplayer import PlaybackEngine, PlayerController, PlayerConfig
from trackplayer.utils.timefmt import position_labels


class ConsoleDisplay:
    """Prints elapsed and remaining time on one line."""

    def push_position(self, current_micros: int, total_micros: int) -> None:
        elapsed, remaining = position_labels(current_micros, total_micros)
        print(f"\r{elapsed} {remaining}   ", end="", flush=True)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python play_track.py <path_to_wav_file>")
        sys.exit(1)

    wav_path = sys.argv[1]
    if not Path(wav_path).exists():
        print(f"Error: File not found: {wav_path}")
        sys.exit(1)

    config = PlayerConfig(poll_interval_ms=500)
    engine = PlaybackEngine(config=config)

    try:
        engine.start()
        controller = PlayerController(engine, display=ConsoleDisplay(), status_listener=print)

        if not controller.load(wav_path):
            sys.exit(1)

        controller.play()

        # Skip ahead once to show seeking during playback
        time.sleep(2.0)
        controller.fast_forward()

        try:
            while controller.is_playing():
                time.sleep(0.1)
            print()
            print("Playback completed")
        except KeyboardInterrupt:
            print("\nInterrupted, stopping...")
            controller.stop()

    finally:
        engine.shutdown()
        print("Engine shut down")
