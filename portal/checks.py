import logging

logger = logging.getLogger(__name__)

CHECK_KINDS = ('plagiarism', 'grammar')


class Checker:
    """Something that can look at a thesis and describe what it found."""

    kind = None

    def run_check(self, thesis):
        raise NotImplementedError


class PlaceholderChecker(Checker):
    """Stand-in used until a real analysis backend is wired up."""

    def __init__(self, kind):
        if kind not in CHECK_KINDS:
            raise ValueError(f'Unknown check kind {kind!r}')
        self.kind = kind

    def run_check(self, thesis):
        logger.info('Running placeholder %s check on thesis %s', self.kind, thesis.id)
        return f'{self.kind.capitalize()} check completed for "{thesis.title}": no analysis backend is configured.'


def default_checkers():
    return {kind: PlaceholderChecker(kind) for kind in CHECK_KINDS}
