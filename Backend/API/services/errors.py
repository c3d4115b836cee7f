class FairnessError(ValueError):
    """Base for input failures raised by the fairness engine."""
    code = "fairness_error"


class InvalidInputFormat(FairnessError):
    code = "invalid_input_format"


class OutOfRangeParameter(FairnessError):
    code = "out_of_range_parameter"


class EmptyRequiredField(FairnessError):
    code = "empty_required_field"
