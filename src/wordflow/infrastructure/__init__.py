# Infrastructure Package
from .yaml_notebook import YamlNotebookRepository

__all__ = ["YamlNotebookRepository"]
