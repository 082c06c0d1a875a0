from __future__ import annotations

import asyncio
import importlib
import json
import sys
from pathlib import Path
from typing import Any

from fx_platform.config.container import Container
from fx_platform.config.context import ModuleConfig
from fx_platform.config.env_loader import load_env_file
from fx_platform.modules.base import Module
from fx_platform.services.lifecycle.lifecycle_manager import LifecycleManager
from fx_platform.services.logger.factory import LoggerFactory
from fx_platform.services.registry import resolve_implementation, resolve_interface_type
from fx_platform.services.secrets.env_secrets import EnvSecrets
from fx_platform.services.secrets.interface import SecretsInterface

MODULES_DIR = Path(__file__).resolve().parent.parent / "modules"

USAGE = "Usage: python -m fx_platform run <module_name> [flags] [module args]"

# Global flags that select interface implementations, with their defaults.
_GLOBAL_FLAGS: dict[str, str] = {
    "cache": "memory",
    "fs": "local",
    "metrics": "noop",
    "log": "pretty",
}

# Module types that get signal handling and run until shut down
_SERVICE_TYPES = {"service"}


def load_module_descriptor(module_name: str) -> dict[str, Any]:
    module_json = MODULES_DIR / module_name / "module.json"
    if not module_json.exists():
        raise FileNotFoundError(f"module '{module_name}' not found at {module_json}")
    with open(module_json) as f:
        return json.load(f)


def parse_module_args(descriptor: dict[str, Any], raw_args: list[str]) -> dict[str, Any]:
    """Parse CLI args against the module.json arg definitions."""
    arg_defs: list[dict[str, Any]] = descriptor.get("args", [])
    parsed: dict[str, str] = {}

    i = 0
    while i < len(raw_args):
        arg = raw_args[i]
        if arg.startswith("--"):
            key = arg[2:]
            if i + 1 < len(raw_args) and not raw_args[i + 1].startswith("--"):
                parsed[key] = raw_args[i + 1]
                i += 2
            else:
                parsed[key] = "true"
                i += 1
        else:
            i += 1

    known = {d["name"] for d in arg_defs}
    errors = [f"Unknown argument: --{name}" for name in parsed if name not in known]

    result: dict[str, Any] = {}
    for arg_def in arg_defs:
        name = arg_def["name"]
        if name in parsed:
            try:
                result[name] = _cast_value(parsed[name], arg_def.get("type", "string"))
            except ValueError:
                errors.append(f"Invalid {arg_def.get('type')} for --{name}: '{parsed[name]}'")
                continue
        elif "default" in arg_def:
            result[name] = arg_def["default"]
        elif arg_def.get("required", False):
            errors.append(f"Missing required argument: --{name}")

        if name in result and "choices" in arg_def and result[name] not in arg_def["choices"]:
            errors.append(
                f"Invalid value for --{name}: '{result[name]}' "
                f"(choices: {', '.join(str(c) for c in arg_def['choices'])})"
            )

    if errors:
        raise ValueError("; ".join(errors))
    return result


def _cast_value(value: str, type_name: str) -> Any:
    match type_name:
        case "integer":
            return int(value)
        case "float":
            return float(value)
        case "boolean":
            return value.lower() in ("true", "1", "yes")
        case _:
            return value


def _parse_env_overrides(raw: str) -> dict[str, str]:
    """Parse a JSON object of string -> string env overrides."""
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError("--env value must be a JSON object")
    for k, v in data.items():
        if not isinstance(k, str) or not isinstance(v, str):
            raise ValueError("--env JSON must have string keys and string values")
    return data


def _extract_global_flags(remaining: list[str]) -> tuple[dict[str, str], dict[str, str], list[str]]:
    """Split global flags from module args.

    Returns (impl_flags, env_overrides, module_args). impl_flags always holds
    every key of ``_GLOBAL_FLAGS``, defaulted where not given.
    """
    impl_flags = dict(_GLOBAL_FLAGS)
    env_overrides: dict[str, str] = {}
    env_file: str | None = None
    filtered_args: list[str] = []

    all_flag_names = set(_GLOBAL_FLAGS) | {"env", "env-file"}

    i = 0
    while i < len(remaining):
        flag = remaining[i]
        if flag.startswith("--") and flag[2:] in all_flag_names and i + 1 < len(remaining):
            name, value = flag[2:], remaining[i + 1]
            if name == "env":
                env_overrides.update(_parse_env_overrides(value))
            elif name == "env-file":
                env_file = value
            else:
                impl_flags[name] = value
            i += 2
        else:
            filtered_args.append(flag)
            i += 1

    if env_file:
        # --env wins over the file
        merged = load_env_file(env_file)
        merged.update(env_overrides)
        env_overrides = merged

    return impl_flags, env_overrides, filtered_args


def print_module_help(descriptor: dict[str, Any]) -> None:
    version = descriptor.get("version", "")
    version_suffix = f" v{version}" if version else ""
    print(f"\n  {descriptor['display_name']}{version_suffix}")
    print(f"  {descriptor['description']}\n")

    args = descriptor.get("args", [])
    if args:
        print("  Module arguments:")
        for arg in args:
            required = " (required)" if arg.get("required") else ""
            default = f" [default: {arg['default']}]" if "default" in arg else ""
            choices_list = arg.get("choices")
            choices = f" (choices: {', '.join(str(c) for c in choices_list)})" if choices_list else ""
            print(f"    --{arg['name']:20s} {arg['description']}{required}{default}{choices}")
        print()

    print("  Global flags:")
    print(f"    --{'cache':20s} Rate cache: memory, redis [default: memory]")
    print(f"    --{'fs':20s} Rates file storage: local, memory [default: local]")
    print(f"    --{'metrics':20s} Metrics: noop, memory, prometheus [default: noop]")
    print(f"    --{'log':20s} Logging format: pretty, memory [default: pretty]")
    print(f"    --{'env':20s} JSON string of env var overrides")
    print(f"    --{'env-file':20s} Environment file name (loads .env/<name>.env)")
    print()


def _build_container(
    impl_flags: dict[str, str],
    env_overrides: dict[str, str],
    module_args: dict[str, Any],
) -> Container:
    """Build the DI container with every platform service registered."""
    container = Container()
    container.register_instance(Container, container)

    secrets = EnvSecrets(overrides=env_overrides)
    container.register_instance(SecretsInterface, secrets)
    container.register_instance(ModuleConfig, ModuleConfig(module_args))

    # --log wins over LOG_IMPL
    log_impl = impl_flags.get("log") or secrets.get_or_default("LOG_IMPL", "pretty")
    logger_factory = LoggerFactory(default_impl=log_impl)
    container.register_instance(LoggerFactory, logger_factory)
    container.register_instance(LifecycleManager, LifecycleManager(log=logger_factory.create()))

    for flag_name, impl_name in impl_flags.items():
        if flag_name == "log":
            continue
        impl_cls = resolve_implementation(flag_name, impl_name)
        container.register_instance(resolve_interface_type(flag_name), container.resolve(impl_cls))

    return container


async def _run_service_module(module_instance: Module, container: Container) -> int:
    lifecycle = container.get(LifecycleManager)
    lifecycle.install_signal_handlers(loop=asyncio.get_running_loop())
    try:
        return await module_instance.run()
    finally:
        await lifecycle.shutdown()


def run_module(argv: list[str]) -> tuple[int, Module | None]:
    """Testable entry point: parse args, build container, run module."""
    if len(argv) < 2 or argv[0] != "run":
        raise ValueError(USAGE)

    module_name = argv[1]
    remaining = argv[2:]
    descriptor = load_module_descriptor(module_name)

    if "--help" in remaining or "-h" in remaining:
        print_module_help(descriptor)
        return 0, None

    impl_flags, env_overrides, filtered_args = _extract_global_flags(remaining)
    module_args = parse_module_args(descriptor, filtered_args)
    container = _build_container(impl_flags, env_overrides, module_args)

    mod = importlib.import_module(f"fx_platform.modules.{module_name}.main")
    if not hasattr(mod, "module_class"):
        raise AttributeError(
            f"Module 'fx_platform.modules.{module_name}.main' must define a 'module_class' attribute"
        )
    module_instance = container.resolve(mod.module_class)

    if descriptor.get("type", "job") in _SERVICE_TYPES:
        exit_code = asyncio.run(_run_service_module(module_instance, container))
    else:
        exit_code = asyncio.run(module_instance.run())
    return exit_code, module_instance


def run_cli(argv: list[str] | None = None) -> None:
    args = argv if argv is not None else sys.argv[1:]
    try:
        exit_code, _ = run_module(args)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)
