import os
from dataclasses import dataclass
from typing import List

from . import config as config_module
from .catalog import load_catalog
from .cli_logger import logger
from .context import PlanningContext
from .environment import build_environment
from .matrix import ALL_VARIANTS, expand_matrix
from .pipeline import ActionGraph, ConfigurationPipeline, add_configuration
from .sdks import host_targets, locate_sdk


@dataclass
class Plan:
    graph: ActionGraph
    pipelines: List[ConfigurationPipeline]

    def to_dict(self):
        data = self.graph.to_dict()
        data["configurations"] = [
            {
                "key": str(pipeline.key),
                "sdk": pipeline.candidate.name,
                "placeholder_sdk": pipeline.candidate.is_placeholder,
                "stages": [stage.name for stage in pipeline.stages],
                "install_alias": pipeline.install_alias,
                "package_alias": pipeline.package_alias,
                "artifact": pipeline.artifact.path,
            }
            for pipeline in self.pipelines
        ]
        return data


def create_context(conf, path=".", host_platform=None, host_path=None):
    """Build the context of one planning run from a loaded nativebuilder.toml."""
    settings = config_module.ProjectSettings.from_config(conf)
    manifest = config_module.load_manifest(os.path.join(path, settings.manifest))
    catalog = load_catalog(conf)
    return PlanningContext(
        catalog=catalog,
        manifest=manifest,
        settings=settings,
        host_platform=host_platform,
        host_path=host_path,
    )


def plan_build(context, variants=ALL_VARIANTS):
    """Resolve an SDK for every configuration and declare its pipeline."""
    keys = expand_matrix(host_targets(context), variants)
    graph = ActionGraph()
    pipelines = []
    for key in keys:
        candidate = locate_sdk(context, key.platform, key.architecture)
        if candidate.is_placeholder:
            logger.info(f"{key}: no usable SDK, planning with a placeholder")
        else:
            logger.info(f"{key}: using {candidate}")
        env = build_environment(candidate, key, context.host_path)
        pipelines.append(add_configuration(graph, key, candidate, env, context.settings))
    return Plan(graph=graph, pipelines=pipelines)
