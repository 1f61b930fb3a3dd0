from .generate import generate_descriptor, generate_function_descriptor, generate_function_format
from .infer_format import InferredFormat, infer_format, infer_label
from .infer_intent import infer_intent
