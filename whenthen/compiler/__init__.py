"""Schedule compiler — rules to launchd job units and plist documents."""

from whenthen.compiler.compiler import ScheduleCompiler
from whenthen.compiler.units import CompiledRule, JobUnit, ScriptArtifact, UnitPaths

__all__ = ["CompiledRule", "JobUnit", "ScheduleCompiler", "ScriptArtifact", "UnitPaths"]
