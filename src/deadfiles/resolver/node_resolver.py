from __future__ import annotations

import json
import os

NODE_MODULES = "node_modules"
CORE_MODULES = frozenset(
    {
        "assert",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "diagnostics_channel",
        "dns",
        "domain",
        "events",
        "fs",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "repl",
        "stream",
        "string_decoder",
        "sys",
        "timers",
        "tls",
        "trace_events",
        "tty",
        "url",
        "util",
        "v8",
        "vm",
        "wasi",
        "worker_threads",
        "zlib",
    }
)


def is_core_module(request: str) -> bool:
    if request.startswith("node:"):
        return True
    return request.split("/", 1)[0] in CORE_MODULES


def is_path_request(request: str) -> bool:
    return request in {".", ".."} or request.startswith(("./", "../", "/"))


def _is_file(path: str) -> bool:
    return os.path.isfile(path)


def _load_as_file(path: str, extensions: list[str]) -> str | None:
    if _is_file(path):
        return path
    for ext in extensions:
        candidate = path + ext
        if _is_file(candidate):
            return candidate
    return None


def _package_main(directory: str) -> str | None:
    manifest = os.path.join(directory, "package.json")
    if not _is_file(manifest):
        return None
    try:
        with open(manifest, encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError):
        return None
    main = data.get("main") if isinstance(data, dict) else None
    return main if isinstance(main, str) and main.strip() else None


def _load_index(directory: str, extensions: list[str]) -> str | None:
    return _load_as_file(os.path.join(directory, "index"), [ext for ext in extensions if ext])


def _load_as_directory(path: str, extensions: list[str]) -> str | None:
    if not os.path.isdir(path):
        return None
    main = _package_main(path)
    if main is not None:
        target = os.path.normpath(os.path.join(path, main))
        found = _load_as_file(target, extensions) or (os.path.isdir(target) and _load_index(target, extensions))
        if found:
            return found
    return _load_index(path, extensions)


def node_modules_paths(start: str) -> list[str]:
    paths: list[str] = []
    current = os.path.normpath(start)
    while True:
        if os.path.basename(current) != NODE_MODULES:
            paths.append(os.path.join(current, NODE_MODULES))
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return paths


def resolve_file(request: str, basedir: str, extensions: list[str]) -> str | None:
    """Resolve ``request`` from ``basedir`` the way Node's ``require.resolve`` does."""
    if is_path_request(request):
        target = os.path.normpath(os.path.join(basedir, request))
        if request.endswith("/"):
            return _load_as_directory(target, extensions)
        return _load_as_file(target, extensions) or _load_as_directory(target, extensions)

    for directory in node_modules_paths(basedir):
        target = os.path.join(directory, request)
        found = _load_as_file(target, extensions) or _load_as_directory(target, extensions)
        if found:
            return os.path.normpath(found)
    return None
