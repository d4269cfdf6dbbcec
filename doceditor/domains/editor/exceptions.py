class EditorError(Exception):
    """Базовая ошибка сессии редактирования"""


class LoadError(EditorError):
    """Документ не найден или хранилище недоступно"""


class TitleCommitError(EditorError):
    """Не удалось сохранить заголовок"""


class ContentCommitError(EditorError):
    """Не удалось сохранить содержимое"""


class SerializationError(EditorError):
    """Дерево содержимого не удается сериализовать или разобрать"""


class EditorStateError(EditorError):
    """Операция недопустима в текущем состоянии сессии"""
