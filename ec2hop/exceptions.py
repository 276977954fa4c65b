class Ec2HopError(Exception):
    """Fatal, user-facing error. The CLI prints it and exits with ``exit_code``."""

    def __init__(self, message, exit_code=1):
        super().__init__(message)
        self.exit_code = exit_code


class DependencyError(Ec2HopError):
    pass


class NothingSelected(Ec2HopError):
    """A resolver stage produced no value; the pipeline stops here."""

    def __init__(self, stage):
        super().__init__(f"Nothing selected at stage '{stage}'", exit_code=0)
        self.stage = stage
