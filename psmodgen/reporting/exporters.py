from __future__ import annotations
from pathlib import Path

from psmodgen import __version__
from psmodgen.generation.regenerator import BatchResult, RegenerationResult
from psmodgen.reporting.schema import ArtifactJSON, BatchReportJSON, ModuleReportJSON

def module_report(res: RegenerationResult) -> ModuleReportJSON:
    return ModuleReportJSON(
        module=res.module,
        files_scanned=res.files_scanned,
        wip_excluded=res.wip_excluded,
        functions=list(res.manifest.functions),
        aliases=list(res.manifest.aliases),
        artifacts=[ArtifactJSON(kind=a.kind, path=a.path.as_posix(), status=a.status.value) for a in res.artifacts],
        warnings=list(res.warnings),
    )

def batch_report(batch: BatchResult, root: Path) -> BatchReportJSON:
    return BatchReportJSON(
        root=Path(root).as_posix(),
        modules=[module_report(r) for r in batch.results],
        failures=dict(batch.failures),
        files_updated=sum(r.files_updated for r in batch.results),
        generator_version=__version__,
    )

def export_json_report(batch: BatchResult, root: Path, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    payload = batch_report(batch, root)
    out_path.write_text(payload.model_dump_json(indent=2), encoding="utf-8")
    return out_path
