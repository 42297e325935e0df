import typer

from apps.parity.classify import classify
from apps.parity.compare import compare
from apps.parity.utils.log_config import configure_logging


app = typer.Typer(help="Compare Bicep what-if and Terraform plan dry runs")


@app.callback()
def parity(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Emit debug level structured logs on stderr.",
    ),
) -> None:
    """Compare Bicep what-if and Terraform plan dry runs."""

    configure_logging(verbose)


app.command("compare")(compare)
app.command("classify")(classify)
