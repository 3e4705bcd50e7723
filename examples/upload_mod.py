"""上传 mod 并下载差异报告

简单脚本：选择 .jar → 选择版本 → 上传并等待结果 → 下载报告

Usage:
    # 先启动 API 服务
    uvicorn api.main:app --port 8000

    # 然后运行
    python -m examples.upload_mod
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console

# 加载环境变量
load_dotenv()

from client import SUPPORTED_VERSIONS, ClientConfig, ModUpdaterError, UploadWorkflow, render_result, save_report
from models import Phase


console = Console()


def main():
    """主流程"""
    logging.basicConfig(level=logging.WARNING)

    console.rule("Mod Updater - 上传 mod")

    # 1. 输入 jar 文件路径
    console.print("\n请输入 .jar 文件路径:")
    file_path = Path(input("> ").strip().strip('"').strip("'"))
    if not file_path.exists():
        console.print(f"[red]❌ 文件不存在: {file_path}[/red]")
        return

    # 2. 输入目标版本
    console.print(f"\n目标版本（可选: {', '.join(SUPPORTED_VERSIONS)}）:")
    version = input("> ").strip()

    # 3. 上传并等待结果
    workflow = UploadWorkflow(ClientConfig.from_env())
    workflow.on_change = lambda s: console.print(f"[cyan][{s.progress:>3}%][/cyan] {s.message}")
    try:
        with open(file_path, "rb") as f:
            session = workflow.run(file_path.name, f.read(), version)

        if session.phase != Phase.COMPLETE:
            console.print(f"[bold red]❌ {session.message}[/bold red]")
            return

        console.print(f"\n[bold green]✅ {render_result(session.result)}[/bold green]")
        console.print(f"   上传名: {session.assigned_name} ← {workflow.mapping.lookup(session.assigned_name)}")

        # 4. 下载报告
        console.print("\n下载差异报告? [y/N]")
        if input("> ").strip().lower() == "y":
            try:
                path = save_report(workflow.download_report(), Path(".data/reports"))
                console.print(f"[green]报告已保存: {path}[/green]")
            except ModUpdaterError as e:
                console.print(f"[red]❌ {e.user_message}[/red]")
    finally:
        workflow.close()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        console.print("\n\n[yellow]⚠️  已取消[/yellow]")
