#!/usr/bin/env python3
"""
File Analyzer - Profiles tabular files and compiles the charts listed in a YAML config
Runs the same profiler and chart compiler the chat agent uses, without a model call
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import yaml

sys.path.insert(0, str(Path(__file__).parent / "core" / "src"))

from eda_engine.core.exceptions import EngineError
from eda_engine.orchestration.tools import ChartToolkit
from eda_engine.services.profiler import profile_file


class AnalysisConfig:
    """Load and manage the analysis configuration from YAML."""

    def __init__(self, config_path: str = "analysis_config.yaml"):
        with open(config_path) as f:
            self.config = yaml.safe_load(f) or {}

    @property
    def enabled_files(self) -> list[dict[str, Any]]:
        """Get list of enabled files."""
        return [f for f in self.config.get("files", []) if f.get("enabled", True)]

    @property
    def output_path(self) -> Path:
        return Path(self.config.get("output", "analysis_results.json"))


class FileAnalyzer:
    """Profile files and compile their configured charts."""

    def __init__(self, config: AnalysisConfig):
        self.config = config
        self.toolkit = ChartToolkit()

    async def analyze_file(self, file_info: dict[str, Any]) -> dict[str, Any]:
        """Profile a single file, then request each configured chart."""
        path = file_info["path"]

        print(f"\n{'=' * 70}")
        print(f"📊 Analyzing: {path}")
        print(f"{'=' * 70}")

        try:
            profile = await asyncio.to_thread(profile_file, path)
        except (EngineError, OSError) as e:
            print(f"  ✗ Profiling failed: {e}")
            return {"file_path": path, "status": "error", "error": str(e)}

        print(f"  ✓ {profile.row_count} rows, {len(profile.column_names)} columns")

        charts = []
        for chart in file_info.get("charts", []):
            observation = await self.toolkit.run_generate_chart({"file_path": path, **chart})
            try:
                charts.append(json.loads(observation))
                print(f"  📈 {chart.get('chart_type')} of {chart.get('x_column')}")
            except json.JSONDecodeError:
                # Tool errors come back as plain text
                charts.append({"error": observation})
                print(f"  ✗ {observation}")

        return {
            "file_path": path,
            "status": "success",
            "profile": profile.model_dump(mode="json"),
            "charts": charts,
        }

    async def analyze_all_files(self) -> list[dict[str, Any]]:
        enabled_files = self.config.enabled_files

        print(f"\n{'█' * 70}")
        print(f"  Tabular File Analyzer")
        print(f"{'█' * 70}")
        print(f"\n📋 Files to analyze: {len(enabled_files)}")
        for file_info in enabled_files:
            print(f"  • {file_info['path']} ({len(file_info.get('charts', []))} charts)")

        results = []
        for file_info in enabled_files:
            results.append(await self.analyze_file(file_info))
        return results

    def save_results(self, results: list[dict[str, Any]]) -> None:
        output_path = self.config.output_path
        with open(output_path, "w") as f:
            json.dump({"config": self.config.config, "results": results}, f, indent=2, default=str)
        print(f"\n💾 Results saved to: {output_path.absolute()}")


async def main():
    """Main execution."""
    config_path = sys.argv[1] if len(sys.argv) > 1 else "analysis_config.yaml"
    try:
        analyzer = FileAnalyzer(AnalysisConfig(config_path))
        results = await analyzer.analyze_all_files()
        analyzer.save_results(results)

        successful = [r for r in results if r["status"] == "success"]
        print(f"\n{'=' * 70}")
        print(f"✓ Analysis complete! {len(successful)}/{len(results)} files profiled")
        print(f"{'=' * 70}\n")
        return 0

    except FileNotFoundError:
        print(f"✗ Error: {config_path} not found!")
        print("  Copy analysis_config.example.yaml and list the files to analyze.")
        return 1
    except (yaml.YAMLError, KeyError) as e:
        print(f"✗ Invalid configuration: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
