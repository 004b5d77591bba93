import os
import subprocess
import sys
from pathlib import Path

# Config
PROJECT_ROOT = Path(__file__).parent.resolve()
BACKEND_DIR  = PROJECT_ROOT / "backend"


# ── Main ─────────────────────────────────────────────────────────────────────

def run():
    print("🚀 Starting Model DESIGNER Translator...")

    python_exec = os.environ.get("MODEL_DESIGNER_PYTHON") or sys.executable
    print(f"   Python: {python_exec}")

    backend_cmd = [
        python_exec, "-m", "uvicorn", "modelgen.main:app",
        "--host", os.environ.get("HOST", "0.0.0.0"),
        "--port", os.environ.get("PORT", "8000"),
        "--workers", "1",
    ]

    print("   API:  http://localhost:8000/api/translate")
    print("   Docs: http://localhost:8000/docs")
    print("   (Press Ctrl+C to stop)")

    backend_proc = subprocess.Popen(backend_cmd, cwd=BACKEND_DIR, stdout=sys.stdout, stderr=sys.stderr)
    try:
        backend_proc.wait()
    except KeyboardInterrupt:
        print("\n🛑 Stopping translator...")
        backend_proc.terminate()
        try:
            backend_proc.wait(timeout=8)
        except subprocess.TimeoutExpired:
            print("   SIGTERM timeout — forcing SIGKILL...")
            backend_proc.kill()
            backend_proc.wait()
    print("👋 Shutdown complete.")


if __name__ == "__main__":
    run()
