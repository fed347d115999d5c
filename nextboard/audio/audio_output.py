"""
Audio output manager (singleton).
Owns the single PyAudio output stream used for alert sounds.
"""

import pyaudio
import numpy as np
import threading
from typing import Optional, Tuple
from config.logging_config import get_logger
from config import settings

logger = get_logger(__name__)


class AudioOutput:
    """
    Singleton audio output manager.
    Plays int16 PCM clips and can be interrupted between chunks.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize the output manager."""
        # Only initialize once
        if hasattr(self, '_initialized'):
            return

        self._initialized = True
        self.pyaudio = pyaudio.PyAudio()
        self.chunk_size = settings.OUTPUT_CHUNK_SIZE

        self.output_stream: Optional[pyaudio.Stream] = None
        self._stream_format: Optional[Tuple[int, int]] = None

        # Playback
        self.playback_active = False
        self.playback_lock = threading.Lock()
        self._stop_requested = threading.Event()

        logger.info("AudioOutput initialized")

    def play_audio(self, audio_data: np.ndarray, sample_rate: int,
                   channels: int = 1) -> bool:
        """
        Play a clip through the default output device, blocking until done.

        Args:
            audio_data: Interleaved int16 samples
            sample_rate: Sample rate of the clip
            channels: Channel count of the clip

        Returns:
            True if the whole clip was played
        """
        self._stop_requested.clear()

        try:
            with self.playback_lock:
                # Reopen the stream if the clip format differs
                if self.output_stream is None or self._stream_format != (sample_rate, channels):
                    self._close_stream()

                    self.output_stream = self.pyaudio.open(
                        format=pyaudio.paInt16,
                        channels=channels,
                        rate=sample_rate,
                        output=True,
                        frames_per_buffer=self.chunk_size
                    )
                    self._stream_format = (sample_rate, channels)

                self.playback_active = True
                step = self.chunk_size * channels

                for start in range(0, len(audio_data), step):
                    if self._stop_requested.is_set():
                        logger.debug("Playback interrupted")
                        return False
                    self.output_stream.write(audio_data[start:start + step].tobytes())

                logger.debug(f"Played {len(audio_data)} samples at {sample_rate}Hz")
                return True

        except Exception as e:
            logger.error(f"Playback error: {e}", exc_info=True)
            return False

        finally:
            self.playback_active = False

    def stop_playback(self) -> None:
        """Interrupt playback and close the output stream."""
        self._stop_requested.set()

        with self.playback_lock:
            self._close_stream()
            self.playback_active = False
            logger.debug("Playback stopped")

    def _close_stream(self) -> None:
        if self.output_stream is not None:
            try:
                self.output_stream.stop_stream()
                self.output_stream.close()
            except Exception as e:
                logger.error(f"Error stopping playback: {e}")
            finally:
                self.output_stream = None
                self._stream_format = None

    def cleanup(self) -> None:
        """Clean up resources."""
        logger.info("Cleaning up AudioOutput")
        self.stop_playback()
        self.pyaudio.terminate()
        AudioOutput._instance = None
        logger.info("AudioOutput cleanup complete")
