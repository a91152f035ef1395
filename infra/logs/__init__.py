from .filesystem_debug_artifact_store import FileSystemDebugArtifactStore

__all__ = ["FileSystemDebugArtifactStore"]
