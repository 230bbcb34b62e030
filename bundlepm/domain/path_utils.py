PATH_SEPARATOR = "/"


def normalize_file_path(file_path: str) -> str:
    """
    Rewrite a manifest destination path into the target filesystem's form.

    Two rules, in order:
    * a path with no separator after its first character loses that first
      character ("/foo.js" -> "foo.js", but also "foo.js" -> "oo.js");
    * otherwise a path that does not start with a separator gets one
      ("bin/foo.js" -> "/bin/foo.js").

    The first-character drop applies regardless of what that character is.
    Published manifests already account for it, so it is kept as-is.
    """
    remainder = file_path[1:]
    if PATH_SEPARATOR not in remainder:
        return remainder
    if file_path[:1] != PATH_SEPARATOR:
        return PATH_SEPARATOR + file_path
    return file_path
