"""Pipeline orchestration: expand, scan, summarize, select, analyze, assemble."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from .archive import expanded_archive
from .config import CodeLocatorConfig
from .llm.dispatcher import AnalysisOutcome, ProviderDispatcher
from .logging import get_logger
from .models import StructureSnapshot
from .repo_scanner import RepoScanner
from .selector import build_key_content
from .summarizer import render_transcript, summarize
from .verification import generate_functional_verification, verification_failure

BASE_QUALITY_SCORE = 60


def _utc_now() -> datetime:
    return datetime.now(UTC)


class AnalysisPipeline:
    """Coordinates one analysis request from uploaded archive to report.

    Stages run strictly in sequence. The scratch directory holding the
    expanded archive exists only for the duration of :meth:`run`.
    """

    def __init__(
        self,
        config: CodeLocatorConfig | None = None,
        *,
        scanner: RepoScanner | None = None,
        dispatcher: ProviderDispatcher | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config = config or CodeLocatorConfig(root=Path.cwd())
        self.scanner = scanner or RepoScanner(self.config.exclude_paths)
        self.dispatcher = dispatcher or ProviderDispatcher(self.config.llm)
        self.clock = clock
        self.logger = get_logger("pipeline")

    def run(
        self,
        problem_description: str,
        archive_path: str | Path,
        *,
        include_verification: bool = False,
    ) -> Dict[str, Any]:
        """Analyze the archive against the problem description and return the report dict.

        Raises :class:`codelocator.archive.ArchiveError` when the archive
        cannot be expanded. Backend failures never surface here.
        """
        archive = Path(archive_path)
        scratch_root = self.config.storage.temp_dir
        self.logger.info("Expanding %s", archive.name)

        with expanded_archive(archive, scratch_root) as workdir:
            self.logger.info("Scanning project structure")
            snapshot = self.scanner.scan(workdir)
            self.logger.debug(
                "Captured %d files (%d lines), %d manifests, %d config files",
                snapshot.total_files,
                snapshot.total_lines,
                len(snapshot.package_files),
                len(snapshot.config_files),
            )
            transcript = render_transcript(snapshot)
            key_content = build_key_content(snapshot)

            self.logger.info("Analyzing features with provider '%s'", self.dispatcher.provider)
            outcome = self.dispatcher.analyze(problem_description, transcript, key_content)

        report = self._assemble(snapshot, outcome)
        if include_verification:
            report["functional_verification"] = self._verify(outcome)
        self.logger.info("Analysis finished with %d features", len(report["feature_analysis"]))
        return report

    def _assemble(self, snapshot: StructureSnapshot, outcome: AnalysisOutcome) -> Dict[str, Any]:
        report = outcome.report.to_dict()
        report["code_structure_summary"] = summarize(snapshot).to_dict()
        report["analysis_metadata"] = {
            "total_files_analyzed": snapshot.total_files,
            "total_lines_analyzed": snapshot.total_lines,
            "analysis_timestamp": self.clock().isoformat(),
            "model_used": outcome.model,
            "provider": outcome.provider,
            "fallback_used": outcome.fallback_used,
            "warnings": list(snapshot.warnings),
        }
        return report

    def _verify(self, outcome: AnalysisOutcome) -> Dict[str, Any]:
        self.logger.info("Generating functional verification")
        try:
            return generate_functional_verification(outcome.report.feature_analysis)
        except Exception as exc:
            self.logger.warning("Functional verification generation failed: %s", exc)
            return verification_failure(str(exc))


def build_report_summary(report: Mapping[str, Any], *, now: datetime | None = None) -> Dict[str, Any]:
    """Headline numbers for a finished report, including a coarse quality score."""
    total_features = len(report.get("feature_analysis") or [])
    has_verification = bool(report.get("functional_verification"))
    has_plan = bool(report.get("execution_plan_suggestion"))

    score = BASE_QUALITY_SCORE
    if total_features > 0:
        score += 20
    if has_verification:
        score += 10
    if has_plan:
        score += 10

    return {
        "total_features_analyzed": total_features,
        "analysis_quality_score": min(score, 100),
        "has_functional_verification": has_verification,
        "has_execution_plan": has_plan,
        "analysis_timestamp": (now or _utc_now()).isoformat(),
    }


__all__ = ["AnalysisPipeline", "build_report_summary"]
