import asyncio
import inspect
import typer
import logging
from dotenv import load_dotenv
from InquirerPy import inquirer


load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

app = typer.Typer()
indexer_app = typer.Typer(help="cli for reconciling zk rollup bridge and batch data.")
app.add_typer(indexer_app, name="indexer")


@indexer_app.command("run")
def run() -> None:
    # settings are read on import; load_dotenv() must run first
    from zk_bridge_indexer.app.interface.tasks import TASKS

    task_name = inquirer.select(
        message="Select task:",
        choices=list(TASKS.keys()),
        pointer="❯",
        instruction="Use ↑/↓ to move, Enter to select",
    ).execute()

    task = TASKS[task_name]
    params = inspect.signature(task).parameters

    kwargs: dict[str, object] = {}

    if "layer" in params:
        kwargs["layer"] = inquirer.select(
            message="Chain with the bridge logs:",
            choices=["l1", "l2"],
            default="l1",
        ).execute()
    if "from_block" in params:
        kwargs["from_block"] = inquirer.text(
            message="From block (inclusive):",
            default="earliest",
        ).execute()
    if "to_block" in params:
        kwargs["to_block"] = inquirer.text(
            message="To block (inclusive):",
            default="latest",
        ).execute()
    if "stage" in params:
        kwargs["stage"] = inquirer.select(
            message="Batch lifecycle stage:",
            choices=["commit", "prove", "execute"],
            default="commit",
        ).execute()

    asyncio.run(task(**kwargs))  # type: ignore


@indexer_app.command("bridge")
def bridge(
    layer: str = typer.Option("l1", help="Chain with the bridge logs: l1 or l2."),
    from_block: str = typer.Option("earliest", help="From block (inclusive) or tag."),
    to_block: str = typer.Option("latest", help="To block (inclusive) or tag."),
) -> None:
    """Reconcile bridge operations for a block range (non-interactive)."""
    from zk_bridge_indexer.app.interface.tasks import TASKS

    asyncio.run(
        TASKS["domain__zkevm_bridge_operations_task"](
            layer=layer,
            from_block=from_block,
            to_block=to_block,
        )
    )


@indexer_app.command("batches")
def batches(
    stage: str = typer.Option("commit", help="Lifecycle stage: commit, prove or execute."),
) -> None:
    """Advance the earliest batch pending a stage (non-interactive)."""
    from zk_bridge_indexer.app.interface.tasks import TASKS

    asyncio.run(TASKS["domain__zksync_batch_status_task"](stage=stage))


if __name__ == "__main__":
    LOGO = r"""
    ==================================================
       zk Bridge Indexer
       rollup bridge operations and batch lifecycle
    ==================================================

      --- zk Bridge Indexer CLI ---
    """
    typer.echo(LOGO)
    app()
