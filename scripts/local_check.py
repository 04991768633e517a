import subprocess
import sys
import tomllib

# (command, description, is_fix)
STEPS = (
    ("toml-sort pyproject.toml --in-place --all", "Sorting TOML", True),
    ("python -m black src scripts tests", "Black formatting", True),
    ("ruff check src scripts tests", "Ruff lint", False),
    ("mypy src/tatboard", "Mypy type check", False),
    ("python -m pytest", "Test suite", False),
)


def run(cmd: str, desc: str, fix: bool = False) -> bool:
    print(f"\n{'🔧' if fix else '🧪'} {desc} ...")
    try:
        subprocess.run(cmd, check=True, shell=True)
    except subprocess.CalledProcessError as e:
        print(f"⚠️  {desc} failed ({e.returncode})")
        return False
    return True


def check_toml() -> None:
    try:
        with open("pyproject.toml", "rb") as f:
            tomllib.load(f)
        print("✅ TOML syntax OK")
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"❌ TOML error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    check_toml()
    failed = [desc for cmd, desc, fix in STEPS if not run(cmd, desc, fix)]
    print("\n🏁 Local check completed." + (f" Failed: {', '.join(failed)}" if failed else ""))
    sys.exit(1 if failed else 0)
