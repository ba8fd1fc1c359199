from .run_io import generate_run_id, resolve_output_dir, write_json, get_package_version

__all__ = ["generate_run_id", "resolve_output_dir", "write_json", "get_package_version"]
