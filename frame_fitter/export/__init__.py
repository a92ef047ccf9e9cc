"""Export pipeline: probing, raster and video backends, orchestration.

Keep this module lightweight: it does not import the Qt worker. For
background exports in a Qt host import it directly:
    - `from frame_fitter.export.export_worker import ExportController`
"""

from .engine import EngineBinaries, VideoEngine, shared_engine
from .image_backend import compose_image
from .orchestrator import ExportJob, ExportOrchestrator, ExportResult
from .probe import probe_duration, probe_media
from .video_backend import EncodeOptions, encode_video

__all__ = [
    "EncodeOptions",
    "EngineBinaries",
    "ExportJob",
    "ExportOrchestrator",
    "ExportResult",
    "VideoEngine",
    "compose_image",
    "encode_video",
    "probe_duration",
    "probe_media",
    "shared_engine",
]
