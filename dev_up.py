# -----------------------------------------------------------------------------
# dev_up.py - Dev launcher for the Formula Workbench UI
# Validates the seed catalog, waits for the remote formula service, optionally
# seeds it, then boots the Streamlit UI and streams its logs.
# Key details:
#   - The remote service is external; this script never starts it
#   - Health probe is GET <API_URL>/api/formulas (the service has no /health)
#   - API_URL is resolved after .env is loaded
# -----------------------------------------------------------------------------

from __future__ import annotations
import argparse
import asyncio
import atexit
import os
import socket
import subprocess
import sys
import time
from pathlib import Path

import httpx

# ---------------------- CONFIG (base defaults) ----------------------
PROJECT_ROOT = Path(__file__).parent.resolve()
UI_FILE = PROJECT_ROOT / "ui" / "app.py"
PYTHONPATH_APPEND = str(PROJECT_ROOT / "src")

# ---------------------- HELPERS ----------------------
def echo(msg: str): print(f"[dev_up] {msg}", flush=True)
def fail(msg: str, code: int = 1): echo(f"❌ {msg}"); sys.exit(code)

def check_port_free(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.settimeout(0.5)
        return s.connect_ex((host, port)) != 0

def wait_for_api(url: str, timeout: float = 60.0) -> bool:
    start = time.time()
    while time.time() - start < timeout:
        try:
            r = httpx.get(url, timeout=2)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(0.4)
    return False

def validate_catalog(path: str):
    from workbench.catalog import load_catalog
    from workbench.errors import CatalogError
    p = Path(path)
    if not p.exists():
        fail(f"Seed catalog not found: {p}")
    try:
        return load_catalog(str(p))
    except CatalogError as e:
        fail(f"Catalog validation failed:\n{e}")

def seed_remote(formulas) -> list:
    from workbench.catalog import seed
    from workbench.client import RemoteClient

    async def _run():
        async with RemoteClient() as client:
            return await seed(client, formulas)
    return asyncio.run(_run())

def which_or_fail(pkg: str, hint: str):
    try:
        __import__(pkg)
    except ImportError:
        fail(f"{pkg} missing → {hint}")

# ---------------------- STARTERS ----------------------
def start_streamlit(port: int) -> subprocess.Popen:
    """Launch the Streamlit UI on the configured port."""
    env = os.environ.copy()
    env["PYTHONPATH"] = (env.get("PYTHONPATH", "") + os.pathsep + PYTHONPATH_APPEND).strip(os.pathsep)
    env.setdefault("STREAMLIT_SERVER_ADDRESS", "0.0.0.0")
    env.setdefault("STREAMLIT_SERVER_HEADLESS", "true")
    env.setdefault("STREAMLIT_BROWSER_GATHER_USAGE_STATS", "false")

    cmd = [
        sys.executable, "-m", "streamlit", "run", str(UI_FILE),
        "--server.port", str(port),
        "--server.address", env["STREAMLIT_SERVER_ADDRESS"],
        "--server.headless", env["STREAMLIT_SERVER_HEADLESS"],
    ]
    echo(f"▶ Starting UI → {' '.join(cmd)}")
    return subprocess.Popen(
        cmd, cwd=str(PROJECT_ROOT), env=env,
        stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True
    )


# ---------------------- MAIN ----------------------
def main():
    parser = argparse.ArgumentParser(description="Formula Workbench dev launcher")
    parser.add_argument("--seed", action="store_true",
                        help="create the formulas from the seed catalog before starting the UI")
    parser.add_argument("--catalog", default=None, help="seed catalog YAML (default: SEED_CATALOG_PATH)")
    parser.add_argument("--no-wait", action="store_true", help="do not wait for the remote service")
    args = parser.parse_args()

    echo("🚀 Launching Formula Workbench...")
    sys.path.insert(0, PYTHONPATH_APPEND)
    from workbench import config   # loads .env on import
    from workbench.logger import setup_logging
    setup_logging(config.LOG_LEVEL)

    which_or_fail("streamlit", "pip install streamlit")

    catalog_path = args.catalog or config.SEED_CATALOG_PATH
    probe_url = f"{config.API_URL}{config.API_PREFIX}/formulas"

    if args.seed:
        echo(f"Validating {catalog_path} ...")
        formulas = validate_catalog(catalog_path)
        echo(f"✅ Catalog OK ({len(formulas)} formulas)")

    if not args.no_wait:
        echo(f"⌛ Waiting for {probe_url} ...")
        if not wait_for_api(probe_url, timeout=60):
            fail("Formula service not reachable; start it or pass --no-wait.")
        echo("✅ Formula service ready")

    if args.seed:
        created = seed_remote(formulas)
        echo(f"🌱 Seeded {len(created)}/{len(formulas)} formulas")

    if not check_port_free("127.0.0.1", config.UI_PORT):
        fail(f"Port {config.UI_PORT} already in use.")

    ui = start_streamlit(config.UI_PORT)

    def cleanup():
        if ui and ui.poll() is None:
            ui.terminate()
            time.sleep(0.5)
            if ui.poll() is None:
                ui.kill()
    atexit.register(cleanup)

    echo(f"🌐 UI running at: http://localhost:{config.UI_PORT}")
    try:
        while ui.poll() is None:
            line = ui.stdout.readline() if ui.stdout else ""
            if line:
                print(f"[UI] {line}", end="")
            else:
                time.sleep(0.2)
    except KeyboardInterrupt:
        echo("🛑 Ctrl+C pressed — shutting down...")
    finally:
        cleanup()
        echo("✅ UI stopped cleanly.")

if __name__ == "__main__":
    main()
