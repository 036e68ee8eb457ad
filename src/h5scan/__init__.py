from h5scan._version import version as __version__
from h5scan.core.config import config
from h5scan.core.descriptor import DatasetDescriptor
from h5scan.core.executor import ScanExecutor
from h5scan.core.projection import resolve_projection
from h5scan.core.scan_item import BoundedMDScan, BoundedScan, ScanItem, UnboundedScan


def print_debug_info() -> None:
    """
    Print version info for use in bug reports.
    """
    import platform
    from importlib.metadata import version

    def print_packages(packages: list[str]) -> None:
        not_installed = []
        for package in packages:
            try:
                print(f"{package}: {version(package)}")
            except ModuleNotFoundError:
                not_installed.append(package)
        if not_installed:
            print("\n**Not Installed:**")
            for package in not_installed:
                print(package)

    required = [
        "numpy",
        "h5py",
        "donfig",
    ]

    print(f"platform: {platform.platform()}")
    print(f"python: {platform.python_version()}")
    print(f"h5scan: {__version__}\n")
    print("**Required dependencies:**")
    print_packages(required)


__all__ = [
    "BoundedMDScan",
    "BoundedScan",
    "DatasetDescriptor",
    "ScanExecutor",
    "ScanItem",
    "UnboundedScan",
    "__version__",
    "config",
    "print_debug_info",
    "resolve_projection",
]
