from inkwell.trash.manifest import LocalTrashManifest

__all__ = ["LocalTrashManifest"]
