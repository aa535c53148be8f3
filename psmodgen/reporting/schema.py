from __future__ import annotations
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

Status = Literal["unchanged", "updated", "created", "skipped"]

class ArtifactJSON(BaseModel):
    kind: Literal["loader", "manifest"] = Field(..., description="loader (.psm1) or manifest (.psd1)")
    path: str = Field(..., description="Artifact path as written")
    status: Status

class ModuleReportJSON(BaseModel):
    module: str
    files_scanned: int = Field(..., ge=0, description="Public function files found, work-in-progress included")
    wip_excluded: int = Field(..., ge=0)
    functions: List[str] = Field(..., description="Exported function names, sorted")
    aliases: List[str] = Field(..., description="Exported alias names, sorted")
    artifacts: List[ArtifactJSON]
    warnings: List[str] = Field(default_factory=list)

class BatchReportJSON(BaseModel):
    root: str
    modules: List[ModuleReportJSON]
    failures: Dict[str, str] = Field(default_factory=dict, description="Module name -> error message")
    files_updated: int = Field(..., ge=0)
    generator_version: Optional[str] = None
