"""Worker-process side: hosts the engine and speaks the line protocol on stdio."""

from .host import WorkerHost, error_payload, load_engine_factory, run_worker

__all__ = ["WorkerHost", "error_payload", "load_engine_factory", "run_worker"]
