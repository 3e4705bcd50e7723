"""Mod Updater Web UI

使用 Gradio 构建的上传界面：拖放或选择 .jar 文件，选择目标版本，
上传后等待转换结果，完成后可以下载差异报告。

集成模式（推荐）：
    启动 API 服务时自动挂载到 /ui 路径
    访问地址：http://localhost:8000/ui

独立运行模式：
    python api/webui.py
    访问地址：http://localhost:7860
"""
import logging
from pathlib import Path

import gradio as gr

from client import (
    SUPPORTED_VERSIONS,
    ClientConfig,
    GatewayClient,
    ModUpdaterError,
    UploadWorkflow,
    render_result,
    stage_report,
)
from models import Phase


logger = logging.getLogger(__name__)


def build_workflow() -> UploadWorkflow:
    """按当前环境变量创建客户端"""
    return UploadWorkflow(ClientConfig.from_env())


def build_gateway() -> GatewayClient:
    """下载报告只需要 HTTP 客户端"""
    return GatewayClient(ClientConfig.from_env())


def upload_mod(file_path, version, progress=gr.Progress()):
    """上传 mod 并等待结果

    Returns:
        (状态文本, 结果文本)
    """
    if not file_path:
        return "Please select a file first", ""

    path = Path(file_path)
    workflow = build_workflow()

    def on_change(session):
        progress(session.progress / 100, desc=session.message)

    workflow.on_change = on_change
    try:
        with open(path, "rb") as f:
            session = workflow.run(path.name, f.read(), version)
    finally:
        workflow.close()

    if session.phase != Phase.COMPLETE:
        return session.message, ""

    return f"{session.message} ({session.progress}%)", render_result(session.result)


def download_report(endpoint):
    """重新拉取差异报告供下载

    Returns:
        (文件路径, 状态文本)
    """
    gateway = build_gateway()
    try:
        report = gateway.download_report(endpoint)
    except ModUpdaterError as e:
        logger.error("下载报告失败: %s (status=%s)", e.detail, e.status_code)
        return None, e.user_message
    finally:
        gateway.close()

    # 临时文件在宽限期后删除
    path, _ = stage_report(report, gateway.config.download_cleanup_delay)
    return str(path), f"Downloading {report.filename} ({len(report.content)} bytes)"


# ============================================================
# Gradio 界面
# ============================================================

app = gr.Blocks(title="Mod Updater")

with app:
    gr.Markdown("""
    # Mod Updater

    上传 mod 的 .jar 文件并选择目标版本，服务端会生成版本差异报告。
    """)

    with gr.Row():
        with gr.Column():
            file_input = gr.File(
                label="拖放或点击选择 .jar 文件",
                file_types=[".jar"],
                file_count="single",
                type="filepath",
            )
            version_input = gr.Dropdown(
                label="目标版本",
                choices=SUPPORTED_VERSIONS,
                value=None,
            )
            upload_btn = gr.Button("上传", variant="primary", size="lg")

        with gr.Column():
            status_output = gr.Markdown("")
            result_output = gr.Textbox(
                label="结果",
                lines=12,
                interactive=False,
            )

    gr.Markdown("### 下载报告")
    with gr.Row():
        report_kind = gr.Radio(
            label="报告类型",
            choices=[("版本差异", "download-diff"), ("Mod 文件差异", "mod-file-diff")],
            value="download-diff",
        )
        download_btn = gr.Button("下载报告", size="sm")
    download_status = gr.Markdown("")
    report_file = gr.File(label="差异报告", interactive=False)

    upload_btn.click(
        upload_mod,
        inputs=[file_input, version_input],
        outputs=[status_output, result_output],
    )

    download_btn.click(
        download_report,
        inputs=[report_kind],
        outputs=[report_file, download_status],
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.launch(
        server_name="0.0.0.0",
        server_port=7860,
        share=False,
        show_error=True,
        inbrowser=False  # 不自动打开浏览器
    )
