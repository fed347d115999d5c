"""
Alert sound player.
Loads WAV clips from local paths or http(s) URLs and plays them.
"""

import asyncio
import hashlib
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urlparse

import httpx
import numpy as np

from config.logging_config import get_logger
from config import settings
from nextboard.audio.audio_output import AudioOutput

logger = get_logger(__name__)


class SoundPlaybackError(Exception):
    """Raised when a sound cannot be loaded or played."""


@dataclass(frozen=True)
class SoundClip:
    """Decoded PCM clip."""
    samples: np.ndarray
    sample_rate: int
    channels: int


class SoundPlayer:
    """
    Plays alert sounds referenced by warning rules.
    Decoded clips are cached in memory; downloads are cached on disk.
    """

    def __init__(self, audio_output: Optional[AudioOutput] = None,
                 cache_dir: Path = None, timeout: float = None):
        """
        Initialize sound player.

        Args:
            audio_output: Output manager (default: the AudioOutput singleton)
            cache_dir: Directory for downloaded sounds (default from settings)
            timeout: Download timeout in seconds (default from settings)
        """
        self.audio_output = audio_output or AudioOutput()
        self.cache_dir = Path(cache_dir or settings.SOUND_CACHE_DIR)
        self.timeout = timeout or settings.SOUND_FETCH_TIMEOUT
        self._clips: Dict[str, SoundClip] = {}

        logger.info(f"SoundPlayer initialized: cache={self.cache_dir}")

    async def play(self, sound_url: str) -> None:
        """
        Play a sound once.

        Args:
            sound_url: Local path or http(s) URL of a WAV file

        Raises:
            SoundPlaybackError: If the sound cannot be loaded or played
        """
        clip = await asyncio.to_thread(self.load, sound_url)
        played = await asyncio.to_thread(
            self.audio_output.play_audio,
            clip.samples,
            clip.sample_rate,
            clip.channels
        )
        if not played:
            raise SoundPlaybackError(f"Playback of {sound_url} did not complete")

    def stop(self) -> None:
        """Interrupt whatever is playing."""
        self.audio_output.stop_playback()

    def load(self, sound_url: str) -> SoundClip:
        """
        Load and decode a sound, using the cache when possible.

        Raises:
            SoundPlaybackError: If the sound cannot be fetched or decoded
        """
        clip = self._clips.get(sound_url)
        if clip is not None:
            return clip

        if urlparse(sound_url).scheme in ("http", "https"):
            path = self._download(sound_url)
        else:
            path = Path(sound_url).expanduser()

        clip = self._decode(path)
        self._clips[sound_url] = clip
        return clip

    def _download(self, url: str) -> Path:
        """Download a remote sound into the cache directory."""
        suffix = Path(urlparse(url).path).suffix or ".wav"
        path = self.cache_dir / (hashlib.sha1(url.encode()).hexdigest() + suffix)
        if path.exists():
            return path

        try:
            response = httpx.get(url, timeout=self.timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SoundPlaybackError(f"Failed to download {url}: {e}") from e

        path.write_bytes(response.content)
        logger.info(f"Downloaded alert sound {url} -> {path.name}")
        return path

    def _decode(self, path: Path) -> SoundClip:
        """Decode a 16-bit PCM WAV file."""
        try:
            with wave.open(str(path), "rb") as wav:
                if wav.getsampwidth() != 2:
                    raise SoundPlaybackError(
                        f"{path.name}: only 16-bit PCM is supported, "
                        f"got {wav.getsampwidth() * 8}-bit"
                    )
                frames = wav.readframes(wav.getnframes())
                return SoundClip(
                    samples=np.frombuffer(frames, dtype=np.int16),
                    sample_rate=wav.getframerate(),
                    channels=wav.getnchannels()
                )
        except (OSError, EOFError, wave.Error) as e:
            raise SoundPlaybackError(f"Cannot decode {path}: {e}") from e
