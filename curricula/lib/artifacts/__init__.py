DEFAULT_ARTIFACT_ENCODING = "utf-8"


def build_artifact_repository(*args: object, **kwargs: object):
    from curricula.lib.artifacts.factory import build_artifact_repository as _build_artifact_repository

    return _build_artifact_repository(*args, **kwargs)


def build_result_sink(*args: object, **kwargs: object):
    from curricula.lib.artifacts.factory import build_result_sink as _build_result_sink

    return _build_result_sink(*args, **kwargs)


__all__ = ["DEFAULT_ARTIFACT_ENCODING", "build_artifact_repository", "build_result_sink"]
