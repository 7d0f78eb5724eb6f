from riscanpro.api.project_io import project_to_dict, project_to_json, save_project_json

__all__ = [
    "project_to_dict",
    "project_to_json",
    "save_project_json",
]
