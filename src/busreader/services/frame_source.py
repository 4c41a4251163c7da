"""OpenCV capture that hands ``FrameData`` to the recognition loop."""

from __future__ import annotations

import abc
import logging
import queue
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

from busreader.config.models import CameraConfig
from busreader.core.entities import FrameData, ImageBuffer, Orientation, PixelFormat

logger = logging.getLogger("services.frame_source")

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff"}


class _FrameStamper:
    """Wraps BGR arrays as ``FrameData`` with increasing ids."""

    def __init__(self, orientation: Orientation, label: str) -> None:
        self._orientation = orientation
        self._label = label
        self._next_id = 0
        self._lock = threading.Lock()

    def wrap(self, image: np.ndarray) -> FrameData:
        with self._lock:
            self._next_id += 1
            frame_id = self._next_id
        return FrameData(
            buffer=ImageBuffer.from_array(image, PixelFormat.BGR8),
            timestamp=datetime.now(timezone.utc),
            frame_id=frame_id,
            orientation=self._orientation,
            source=self._label,
        )


class FrameSource(abc.ABC):
    """Anything that delivers camera frames to the capture loop."""

    label: str

    @abc.abstractmethod
    def start(self) -> None:
        """Open the device; frames become available to ``read`` afterwards."""

    @abc.abstractmethod
    def read(self, timeout_s: float = 1.0) -> Optional[FrameData]:
        """Return the next frame, or ``None`` if none arrived within ``timeout_s``."""

    @abc.abstractmethod
    def stop(self) -> None:
        """Release the device."""

    @property
    def finished(self) -> bool:
        """True once the source can never produce another frame."""
        return False


class VideoCaptureSource(FrameSource):
    """Captures from a camera index, or plays a video file, on a reader thread.

    Only the newest frame is kept, so a slow pipeline skips frames rather than
    lagging behind the street. A camera that stops delivering is reopened
    after ``reopen_delay_s``. A video file rewinds at its end when ``loop`` is
    set and otherwise finishes the source.
    """

    def __init__(
        self,
        device: Union[int, str],
        width: int,
        height: int,
        fps: int,
        orientation: Orientation = Orientation.LANDSCAPE_LEFT,
        reopen_delay_s: float = 1.0,
        loop: bool = True,
    ) -> None:
        self._device = device
        self._width = width
        self._height = height
        self._fps = fps
        self._reopen_delay_s = reopen_delay_s
        self._loop = loop
        self.label = f"video:{device}" if self.is_file else f"camera:{device}"
        self._stamper = _FrameStamper(orientation, self.label)
        self._latest: "queue.Queue[FrameData]" = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._finished = threading.Event()
        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def is_file(self) -> bool:
        return isinstance(self._device, str)

    @property
    def finished(self) -> bool:
        return self._finished.is_set() and self._latest.empty()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._finished.clear()
        self._thread = threading.Thread(target=self._run, name="FrameSourceReader", daemon=True)
        self._thread.start()

    def read(self, timeout_s: float = 1.0) -> Optional[FrameData]:
        try:
            return self._latest.get(timeout=timeout_s)
        except queue.Empty:
            return None

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2.0)
        self._thread = None
        self._release()

    def _open_capture(self) -> bool:
        cap = cv2.VideoCapture(self._device)
        if not cap.isOpened():
            logger.error("Unable to open %s", self.label)
            cap.release()
            return False
        if not self.is_file:
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
            cap.set(cv2.CAP_PROP_FPS, self._fps)
            cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        self._cap = cap
        logger.info("Capturing from %s", self.label)
        return True

    def _release(self) -> None:
        if self._cap is not None:
            self._cap.release()
        self._cap = None

    def _run(self) -> None:
        while not self._stop_event.is_set():
            if self._cap is None and not self._open_capture():
                if self._stop_event.wait(self._reopen_delay_s):
                    break
                continue

            assert self._cap is not None
            ok, image = self._cap.read()
            if ok and image is not None:
                self._keep_latest(self._stamper.wrap(image))
                continue

            if self.is_file:
                if self._loop and self._cap.set(cv2.CAP_PROP_POS_FRAMES, 0):
                    logger.debug("Rewinding %s", self.label)
                    continue
                logger.info("Reached the end of %s", self.label)
                self._finished.set()
                break

            logger.warning("%s stopped delivering frames; reopening.", self.label)
            self._release()
            if self._stop_event.wait(self._reopen_delay_s):
                break

    def _keep_latest(self, frame: FrameData) -> None:
        try:
            self._latest.get_nowait()
        except queue.Empty:
            pass
        self._latest.put(frame)


class StaticImageSource(FrameSource):
    """Presents one still image as an endless stream of frames."""

    def __init__(self, image_path: Path, orientation: Orientation = Orientation.LANDSCAPE_LEFT) -> None:
        self._image_path = image_path
        self.label = f"image:{image_path}"
        self._stamper = _FrameStamper(orientation, self.label)
        self._image: Optional[np.ndarray] = None

    def start(self) -> None:
        image = cv2.imread(str(self._image_path))
        if image is None:
            raise FileNotFoundError(f"Unable to load image at {self._image_path}")
        self._image = image
        logger.info("Loaded still image %s (%dx%d)", self._image_path, image.shape[1], image.shape[0])

    def read(self, timeout_s: float = 1.0) -> Optional[FrameData]:
        if self._image is None:
            return None
        return self._stamper.wrap(self._image)

    def stop(self) -> None:
        self._image = None


def open_frame_source(camera: CameraConfig) -> FrameSource:
    """Pick a source for ``camera.device_index``: a camera index, a video file or a still image."""
    device = camera.device_index
    orientation = camera.resolved_orientation()
    if isinstance(device, str):
        path = Path(device)
        if path.suffix.lower() in IMAGE_SUFFIXES and path.exists():
            return StaticImageSource(path, orientation)
        if device.isdigit():
            device = int(device)
    width, height = camera.resolution
    return VideoCaptureSource(
        device,
        width,
        height,
        camera.fps,
        orientation=orientation,
        reopen_delay_s=camera.reconnect_delay_ms / 1000.0,
        loop=camera.loop_video,
    )
