from stylescope.stylesheet.serializer import serialize

__all__ = ["serialize"]
