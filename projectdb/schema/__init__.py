"""Schema introspection and relationship inference module"""

from .inference import RelationshipInferrer
from .introspector import SchemaIntrospector

__all__ = ["RelationshipInferrer", "SchemaIntrospector"]
