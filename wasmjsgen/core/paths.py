"""Path arithmetic for output locations and generated import references.

All paths are POSIX style regardless of the host platform, since they end up
inside generated source text.
"""

from __future__ import annotations

import posixpath


def _strip_separators(value: str) -> str:
    return value.replace(".", "").replace("-", "").replace("_", "")


class PathCalculator:
    """Pure path helpers: package to directory mapping and relative imports."""

    def relative_path(self, from_path: str, to_path: str) -> str:
        """Relative reference from one directory to another, always ``./`` or ``../`` prefixed."""
        from_path = posixpath.normpath(from_path or ".")
        to_path = posixpath.normpath(to_path or ".")
        if from_path == to_path:
            return "."
        rel = posixpath.relpath(to_path, from_path)
        if rel != "." and not rel.startswith(("./", "../")):
            rel = "./" + rel
        return rel

    def package_path(self, package_name: str) -> str:
        return package_name.replace(".", "/")

    def cross_package_import_path(self, current_package: str, target_package: str) -> str:
        """Climb out of ``current_package`` and point at ``target_package``.

        ``library.v1`` -> ``library.common`` gives ``../../library_common``.
        """
        if current_package == target_package:
            return "."
        depth = self.package_path(current_package).count("/") + 1
        return "../" * depth + target_package.replace(".", "_")

    def factory_import_path(self, dependency_package: str, current_package: str) -> str:
        if dependency_package == current_package:
            return "./factory"
        return self.cross_package_import_path(current_package, dependency_package) + "/factory"

    def directory_import(self, from_dir: str, to_dir: str, module: str) -> str:
        """Import specifier for ``module`` living in ``to_dir`` as seen from ``from_dir``."""
        rel = self.relative_path(from_dir, to_dir)
        if rel == ".":
            return f"./{module}"
        return f"{rel}/{module}"

    def output_file_path(self, base_output_path: str, package_name: str, file_name: str) -> str:
        return self.join(base_output_path, self.package_path(package_name), file_name)

    def go_package_alias(self, package_path: str) -> str:
        parts = [_strip_separators(part) for part in package_path.split("/")]
        if len(parts) >= 2:
            return (parts[-2] + parts[-1]).lower()
        return parts[-1].lower()

    def normalize(self, path: str) -> str:
        """Clean ``path`` while keeping an explicit leading ``./``."""
        starts_with_dot = path.startswith("./")
        normalized = posixpath.normpath(path) if path else "."
        if (
            starts_with_dot
            and normalized != "."
            and not normalized.startswith(("./", "../"))
        ):
            normalized = "./" + normalized
        return normalized

    def is_absolute(self, path: str) -> bool:
        return posixpath.isabs(path)

    def join(self, *components: str) -> str:
        non_empty = [component for component in components if component]
        if not non_empty:
            return ""
        joined = posixpath.join(*non_empty)
        if non_empty[0].startswith("./"):
            return self.normalize(joined)
        return posixpath.normpath(joined)


__all__ = ["PathCalculator"]
