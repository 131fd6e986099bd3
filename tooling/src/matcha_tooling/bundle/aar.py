"""Package the Android work tree into an .aar.

Layout of the archive:

    AndroidManifest.xml
    proguard.txt
    classes.jar            (javac of src/main/java against android.jar)
    R.txt
    res/
    jni/<abi>/libgojni.so  (one per built arch)

Entries are written sorted with a fixed timestamp so identical inputs give
byte-identical archives.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import zipfile
from collections.abc import Iterable, Mapping
from pathlib import Path

from matcha_tooling.bind.env import android_abi
from matcha_tooling.errors import ConfigurationError, PackagingError
from matcha_tooling.helpers import copy_dir_contents, mkdir, remove_all, stderr_tail
from matcha_tooling.toolchain.packages import GoPackage, imports_bridge

log = logging.getLogger(__name__)

ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

MANIFEST_TEMPLATE = """<manifest xmlns:android="http://schemas.android.com/apk/res/android" package="{package}">
  <uses-sdk android:minSdkVersion="{api}"/>
</manifest>
"""

PROGUARD_TEXT = """-keep class go.** { *; }
-keep class io.gomatcha.** { *; }
"""

_ANDROID_PLATFORM = re.compile(r"^android-(\d+)$")


def find_android_jar(android_home: Path | None) -> Path:
    """Highest-API platforms/android-N/android.jar under android_home. Raises ConfigurationError."""
    if android_home is None:
        msg = "ANDROID_HOME is not set; it is needed to compile the Java bridge"
        raise ConfigurationError(msg)
    platforms = android_home / "platforms"
    best: tuple[int, Path] | None = None
    if platforms.is_dir():
        for p in platforms.iterdir():
            m = _ANDROID_PLATFORM.match(p.name)
            jar = p / "android.jar"
            if m and jar.is_file() and (best is None or int(m.group(1)) > best[0]):
                best = (int(m.group(1)), jar)
    if best is None:
        msg = f"no platforms/android-*/android.jar under {android_home}"
        raise ConfigurationError(msg)
    return best[1]


def android_home_from_env(environ: Mapping[str, str] | None = None) -> Path | None:
    environ = os.environ if environ is None else environ
    value = environ.get("ANDROID_HOME") or environ.get("ANDROID_SDK_ROOT")
    return Path(value) if value else None


def copy_package_java(
    packages: Iterable[GoPackage], java_root: Path, bridge_import: str
) -> list[GoPackage]:
    """Copy <pkg>/android/ into java_root for every package importing the bridge. Returns those packages."""
    copied = []
    for pkg in packages:
        src = pkg.dir / "android"
        if imports_bridge(pkg, bridge_import) and src.is_dir():
            copy_dir_contents(java_root, src)
            copied.append(pkg)
    return copied


def compile_java(java_root: Path, classes_dir: Path, android_jar: Path) -> list[Path]:
    """javac every .java under java_root into classes_dir. Returns the sources compiled."""
    sources = sorted(java_root.rglob("*.java")) if java_root.is_dir() else []
    mkdir(classes_dir)
    if not sources:
        return []
    if shutil.which("javac") is None:
        msg = "javac not found in PATH; install a JDK"
        raise ConfigurationError(msg)
    cmd = [
        "javac",
        "-source",
        "1.7",
        "-target",
        "1.7",
        "-bootclasspath",
        str(android_jar),
        "-d",
        str(classes_dir),
        *[str(s) for s in sources],
    ]
    log.debug("run: %s", " ".join(cmd))
    r = subprocess.run(cmd, capture_output=True, text=True)
    if r.returncode != 0:
        msg = f"javac failed (exit {r.returncode}):\n{stderr_tail(r.stderr or r.stdout)}"
        raise PackagingError(msg)
    return sources


def _write_entry(zf: zipfile.ZipFile, name: str, data: bytes) -> None:
    info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    zf.writestr(info, data)


def write_jar(classes_dir: Path, jar_path: Path) -> Path:
    """Zip classes_dir into jar_path (sorted entries, fixed timestamps)."""
    try:
        with zipfile.ZipFile(jar_path, "w") as zf:
            _write_entry(zf, "META-INF/MANIFEST.MF", b"Manifest-Version: 1.0\r\n\r\n")
            for f in sorted(p for p in classes_dir.rglob("*") if p.is_file()):
                _write_entry(zf, f.relative_to(classes_dir).as_posix(), f.read_bytes())
    except OSError as e:
        msg = f"could not write {jar_path}: {e}"
        raise PackagingError(msg) from e
    return jar_path


def build_aar(
    android_dir: Path,
    packages: Iterable[GoPackage],
    archs: Iterable[str],
    work_dir: Path,
    aar_path: Path,
    *,
    android_home: Path | None = None,
    java_package: str = "io.gomatcha.bridge",
    min_api: str = "15",
    bridge_import: str = "gomatcha.io/bridge",
) -> Path:
    """Compile the Java bridge and write the .aar at aar_path. Raises ConfigurationError/PackagingError."""
    archs = sorted(archs)
    jni_libs = android_dir / "src" / "main" / "jniLibs"
    libs = {}
    for arch in archs:
        so = jni_libs / android_abi(arch) / "libgojni.so"
        if not so.is_file():
            msg = f"missing shared object for {arch}: {so}"
            raise PackagingError(msg, arch=arch)
        libs[android_abi(arch)] = so

    java_root = android_dir / "src" / "main" / "java"
    copy_package_java(packages, java_root, bridge_import)

    android_jar = find_android_jar(android_home if android_home is not None else android_home_from_env())
    build_dir = work_dir / "aar-build"
    remove_all(build_dir)
    classes_dir = build_dir / "classes"
    compile_java(java_root, classes_dir, android_jar)
    jar_path = write_jar(classes_dir, build_dir / "classes.jar")

    mkdir(aar_path.parent)
    try:
        with zipfile.ZipFile(aar_path, "w") as zf:
            manifest = MANIFEST_TEMPLATE.format(package=java_package, api=min_api)
            _write_entry(zf, "AndroidManifest.xml", manifest.encode())
            _write_entry(zf, "R.txt", b"")
            _write_entry(zf, "classes.jar", jar_path.read_bytes())
            for abi in sorted(libs):
                _write_entry(zf, f"jni/{abi}/libgojni.so", libs[abi].read_bytes())
            _write_entry(zf, "proguard.txt", PROGUARD_TEXT.encode())
            zf.writestr(zipfile.ZipInfo("res/", date_time=ZIP_EPOCH), b"")
    except OSError as e:
        msg = f"could not write {aar_path}: {e}"
        raise PackagingError(msg) from e
    print(f"📦 AAR ({', '.join(sorted(libs))}): {aar_path}")
    return aar_path
