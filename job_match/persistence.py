"""
Persistence Layer

A training run produces three artifacts (model parameters, metadata, report)
that are written together under one run id. Storage goes through an
ArtifactStore so the pipeline can run against the filesystem or memory.
"""

import io
import json
import logging
import os
import shutil
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import torch

from .errors import ArtifactMissingError
from .model import EngagementRegressor, create_model_from_config

logger = logging.getLogger(__name__)

MODEL_ARTIFACT = 'model.pt'
METADATA_ARTIFACT = 'metadata.json'
REPORT_ARTIFACT = 'report.json'
LATEST_POINTER = 'LATEST'


def generate_run_id(now: Optional[datetime] = None) -> str:
    """Timestamp shared by the three artifacts of a run"""
    return (now or datetime.now()).strftime("%Y%m%d_%H%M%S_%f")


class ArtifactStore(ABC):
    """Get/put interface over named artifacts grouped by run id"""

    @abstractmethod
    def put_run(self, run_id: str, artifacts: Dict[str, bytes]) -> None:
        """Store all artifacts of a run so that readers see all or none of them"""

    @abstractmethod
    def get(self, run_id: str, name: str) -> bytes:
        """Return an artifact, raising ArtifactMissingError if it is absent"""

    @abstractmethod
    def list_runs(self) -> List[str]:
        """Committed run ids, oldest first"""

    @abstractmethod
    def latest_run_id(self) -> Optional[str]:
        """Most recently committed run id, None when nothing was committed"""

    def exists(self, run_id: str, name: str) -> bool:
        try:
            self.get(run_id, name)
        except ArtifactMissingError:
            return False
        return True


class InMemoryArtifactStore(ArtifactStore):
    """Artifact store held in process memory"""

    def __init__(self):
        self._runs: Dict[str, Dict[str, bytes]] = {}
        self._order: List[str] = []
        self._lock = threading.Lock()

    def put_run(self, run_id: str, artifacts: Dict[str, bytes]) -> None:
        with self._lock:
            if run_id in self._runs:
                raise FileExistsError(f"Run {run_id} already exists")
            self._runs[run_id] = dict(artifacts)
            self._order.append(run_id)

    def get(self, run_id: str, name: str) -> bytes:
        with self._lock:
            run = self._runs.get(run_id)
            if run is None or name not in run:
                raise ArtifactMissingError(name, run_id)
            return run[name]

    def list_runs(self) -> List[str]:
        with self._lock:
            return list(self._order)

    def latest_run_id(self) -> Optional[str]:
        with self._lock:
            return self._order[-1] if self._order else None


class LocalArtifactStore(ArtifactStore):
    """
    Filesystem artifact store.

    Layout: <root>/runs/<run_id>/<artifact> plus <root>/LATEST naming the
    newest run. A run is written into a hidden staging directory and renamed
    into place, then LATEST is swapped with os.replace. Nothing is created on
    disk until the first run is committed.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.runs_dir = self.root / 'runs'

    def put_run(self, run_id: str, artifacts: Dict[str, bytes]) -> None:
        final_dir = self.runs_dir / run_id
        if final_dir.exists():
            raise FileExistsError(f"Run {run_id} already exists at {final_dir}")

        self.runs_dir.mkdir(parents=True, exist_ok=True)
        staging_dir = Path(tempfile.mkdtemp(prefix=f'.staging-{run_id}-', dir=self.runs_dir))
        try:
            for name, data in artifacts.items():
                with open(staging_dir / name, 'wb') as f:
                    f.write(data)
                    f.flush()
                    os.fsync(f.fileno())
            os.rename(staging_dir, final_dir)
        except BaseException:
            shutil.rmtree(staging_dir, ignore_errors=True)
            raise

        self._write_latest(run_id)
        logger.info(f"Committed run {run_id} to {final_dir}")

    def _write_latest(self, run_id: str):
        fd, tmp_path = tempfile.mkstemp(prefix='.latest-', dir=self.root)
        try:
            with os.fdopen(fd, 'w') as f:
                f.write(run_id)
            os.replace(tmp_path, self.root / LATEST_POINTER)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get(self, run_id: str, name: str) -> bytes:
        path = self.runs_dir / run_id / name
        if not path.is_file():
            raise ArtifactMissingError(name, run_id)
        return path.read_bytes()

    def list_runs(self) -> List[str]:
        if not self.runs_dir.is_dir():
            return []
        return sorted(
            entry.name for entry in self.runs_dir.iterdir()
            if entry.is_dir() and not entry.name.startswith('.')
        )

    def latest_run_id(self) -> Optional[str]:
        pointer = self.root / LATEST_POINTER
        if pointer.is_file():
            run_id = pointer.read_text().strip()
            if (self.runs_dir / run_id).is_dir():
                return run_id
        runs = self.list_runs()
        return runs[-1] if runs else None


def serialize_model(model: EngagementRegressor) -> bytes:
    buffer = io.BytesIO()
    torch.save({'state_dict': model.state_dict(), **model.architecture()}, buffer)
    return buffer.getvalue()


def deserialize_model(data: bytes) -> EngagementRegressor:
    checkpoint = torch.load(io.BytesIO(data), map_location='cpu', weights_only=True)
    model = create_model_from_config(checkpoint)
    model.load_state_dict(checkpoint['state_dict'])
    model.eval()
    return model


def _to_json_bytes(document: Dict[str, Any]) -> bytes:
    return json.dumps(document, indent=2).encode('utf-8')


@dataclass
class LoadedArtifacts:
    run_id: str
    model: EngagementRegressor
    metadata: Dict[str, Any]


class ArtifactRepository:
    """
    Reads and writes the model/metadata/report set of a training run
    """

    def __init__(self, store: ArtifactStore):
        self.store = store

    def save(self, run_id: str, model: EngagementRegressor,
             metadata: Dict[str, Any], report: Dict[str, Any]) -> None:
        """
        Persist a complete artifact set

        Args:
            run_id: Shared run timestamp
            model: Trained model
            metadata: Vocabulary and feature layout document
            report: Training report document
        """
        self.store.put_run(run_id, {
            MODEL_ARTIFACT: serialize_model(model),
            METADATA_ARTIFACT: _to_json_bytes(metadata),
            REPORT_ARTIFACT: _to_json_bytes(report),
        })
        logger.info(f"Model, metadata and report saved for run {run_id}")

    def resolve_run_id(self, run_id: Optional[str] = None) -> str:
        resolved = run_id or self.store.latest_run_id()
        if resolved is None:
            raise ArtifactMissingError(MODEL_ARTIFACT)
        return resolved

    def load(self, run_id: Optional[str] = None) -> LoadedArtifacts:
        """
        Load the model together with its metadata

        Args:
            run_id: Run to load; the latest run when omitted

        Returns:
            LoadedArtifacts
        """
        resolved = self.resolve_run_id(run_id)
        metadata = json.loads(self.store.get(resolved, METADATA_ARTIFACT).decode('utf-8'))
        model = deserialize_model(self.store.get(resolved, MODEL_ARTIFACT))

        logger.info(f"Model loaded from run {resolved}")
        return LoadedArtifacts(run_id=resolved, model=model, metadata=metadata)

    def load_metadata(self, run_id: Optional[str] = None) -> Dict[str, Any]:
        resolved = self.resolve_run_id(run_id)
        return json.loads(self.store.get(resolved, METADATA_ARTIFACT).decode('utf-8'))

    def load_report(self, run_id: Optional[str] = None) -> Dict[str, Any]:
        resolved = self.resolve_run_id(run_id)
        return json.loads(self.store.get(resolved, REPORT_ARTIFACT).decode('utf-8'))
