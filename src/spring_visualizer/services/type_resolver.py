from abc import ABC, abstractmethod
import re

_TYPE_ANNOTATION_RE = re.compile(r'@[\w.$]+\s*(\([^)]*\))?')


class BaseTypeResolver(ABC):
    """Abstract base class for type resolvers across different languages."""

    @abstractmethod
    def simple_type_name(self, type_name: str) -> str:
        """Reduce a declared type to the simple class name used as node identity."""
        pass


class JavaTypeResolver(BaseTypeResolver):
    """Reduces Java type text to a simple class name.

    Generic arguments, array brackets, varargs and package qualification are
    dropped: ``java.util.List<Foo>`` becomes ``List`` and ``com.x.Bar[]``
    becomes ``Bar``.
    """

    def simple_type_name(self, type_name: str) -> str:
        if not type_name:
            return ""
        clean_type = _TYPE_ANNOTATION_RE.sub('', type_name)
        generic_start = clean_type.find('<')
        if generic_start != -1:
            clean_type = clean_type[:generic_start]
        clean_type = re.sub(r'\s+', '', clean_type)
        clean_type = clean_type.replace('[]', '').replace('...', '')
        return clean_type.rsplit('.', 1)[-1]
