import logging
from functools import partial

import gradio as gr

from smart_case_lab.config import DRAFT_DIR, LOG_LEVEL
from smart_case_lab.handlers import (
    add_manual_column,
    add_row,
    apply_rules,
    copy_from_previous,
    delete_row,
    export_api_template,
    export_csv,
    export_json,
    generate_cell,
    generate_row,
    generate_rows,
    load_saved_draft,
    process_pasted_json,
    process_uploaded_json,
    remove_field,
    suggest_data_type,
    sync_grid_edits,
    toggle_required,
    undo_remove_field,
)
from smart_case_lab.rules import DATA_TYPES
from smart_case_lab.storage import FileStore

store = FileStore(DRAFT_DIR)

# --- UI Definition ---
with gr.Blocks(title="SmartCaseLab") as demo:
    gr.Markdown("# SmartCaseLab")
    gr.Markdown("Turn a JSON payload into a grid of test cases, edit or generate values, and export them.")

    # State
    table_state = gr.State()

    with gr.Row():
        # Left Panel: Input
        with gr.Column(scale=1):
            gr.Markdown("### 1. Upload JSON File")
            file_input = gr.File(label="Upload JSON File", file_types=[".json"])
        with gr.Column(scale=1):
            gr.Markdown("### or Paste JSON Data")
            json_input = gr.Textbox(
                label="JSON",
                lines=8,
                placeholder='{\n  "key": "value",\n  "nested": {\n    "anotherKey": "anotherValue"\n  }\n}',
            )
            paste_btn = gr.Button("Process Pasted JSON", variant="primary")

    status_msg = gr.Textbox(label="Status", interactive=False)

    gr.Markdown("### 2. Generated Test Cases Table")
    grid = gr.Dataframe(label="Test Cases", interactive=True, datatype="str", wrap=True)

    with gr.Row():
        row_number = gr.Number(label="Row", value=1, precision=0, minimum=1)
        column_selector = gr.Dropdown(label="Column", choices=[], interactive=True, allow_custom_value=False)

    with gr.Row():
        add_row_btn = gr.Button("Add Row")
        delete_row_btn = gr.Button("Delete Row", variant="stop")
        copy_prev_btn = gr.Button("Copy Prev")
        generate_cell_btn = gr.Button("Auto-generate Cell")
        generate_row_btn = gr.Button("Auto-generate Row")

    with gr.Row():
        remove_field_btn = gr.Button("Remove Field")
        undo_remove_btn = gr.Button("Undo Remove")
        required_btn = gr.Button("Toggle Required")

    with gr.Row():
        new_column_name = gr.Textbox(label="New Column Name", placeholder="New Column Name")
        add_column_btn = gr.Button("Add Custom Column")
        bulk_count = gr.Number(label="Rows to generate", value=5, precision=0, minimum=1)
        bulk_btn = gr.Button("Generate Rows")

    removed_table = gr.Dataframe(
        headers=["Row", "Column", "Removed Value"],
        datatype=["number", "str", "str"],
        interactive=False,
        label="Removed Fields",
    )

    with gr.Accordion("Field Rules", open=False):
        with gr.Row():
            rule_type = gr.Dropdown(label="Data Type", choices=list(DATA_TYPES), value="string")
            detect_btn = gr.Button("Detect Type")
        with gr.Row():
            rule_min = gr.Textbox(label="Minimum Value / Start Date")
            rule_max = gr.Textbox(label="Maximum Value / End Date")
            rule_enum = gr.Textbox(label="Possible Values (comma-separated)", placeholder="value1, value2, value3")
        with gr.Row():
            rule_cases = gr.Number(label="Number of Additional Test Cases", value=0, precision=0, minimum=0, maximum=100)
            rule_bool = gr.Dropdown(label="Boolean Value", choices=["true", "false", "random"], value="true")
            rule_null = gr.Slider(label="Probability of Null (%)", minimum=0, maximum=100, value=0, step=1)
        with gr.Row():
            rule_existing = gr.Checkbox(label="Apply to existing rows")
            rule_remove_field = gr.Checkbox(label="Remove this field from current test case")
            rule_remove_object = gr.Checkbox(label="Remove entire object from current test case")
        save_rules_btn = gr.Button("Save Rules", variant="primary")

    gr.Markdown("### 3. Export")
    with gr.Row():
        export_json_btn = gr.Button("Export JSON")
        export_csv_btn = gr.Button("Export CSV")
        export_api_btn = gr.Button("Export API Template")
    download_output = gr.File(label="Download Result")

    outputs = [table_state, grid, column_selector, removed_table, status_msg, download_output]

    demo.load(fn=partial(load_saved_draft, store), inputs=[], outputs=outputs)

    file_input.upload(fn=partial(process_uploaded_json, store=store), inputs=[table_state, file_input], outputs=outputs)
    paste_btn.click(fn=partial(process_pasted_json, store=store), inputs=[table_state, json_input], outputs=outputs)
    grid.input(fn=partial(sync_grid_edits, store=store), inputs=[table_state, grid], outputs=outputs)

    add_row_btn.click(fn=partial(add_row, store=store), inputs=[table_state], outputs=outputs)
    delete_row_btn.click(fn=partial(delete_row, store=store), inputs=[table_state, row_number], outputs=outputs)
    copy_prev_btn.click(fn=partial(copy_from_previous, store=store), inputs=[table_state, row_number], outputs=outputs)
    generate_cell_btn.click(
        fn=partial(generate_cell, store=store),
        inputs=[table_state, row_number, column_selector],
        outputs=outputs,
    )
    generate_row_btn.click(fn=partial(generate_row, store=store), inputs=[table_state, row_number], outputs=outputs)
    remove_field_btn.click(
        fn=partial(remove_field, store=store),
        inputs=[table_state, row_number, column_selector],
        outputs=outputs,
    )
    undo_remove_btn.click(
        fn=partial(undo_remove_field, store=store),
        inputs=[table_state, row_number, column_selector],
        outputs=outputs,
    )
    required_btn.click(fn=partial(toggle_required, store=store), inputs=[table_state, column_selector], outputs=outputs)
    add_column_btn.click(fn=partial(add_manual_column, store=store), inputs=[table_state, new_column_name], outputs=outputs)
    bulk_btn.click(fn=partial(generate_rows, store=store), inputs=[table_state, bulk_count], outputs=outputs)

    detect_btn.click(fn=suggest_data_type, inputs=[table_state, row_number, column_selector], outputs=[rule_type])
    save_rules_btn.click(
        fn=partial(apply_rules, store=store),
        inputs=[
            table_state,
            row_number,
            column_selector,
            rule_type,
            rule_min,
            rule_max,
            rule_enum,
            rule_cases,
            rule_bool,
            rule_null,
            rule_existing,
            rule_remove_field,
            rule_remove_object,
        ],
        outputs=outputs,
    )

    export_json_btn.click(fn=export_json, inputs=[table_state], outputs=outputs)
    export_csv_btn.click(fn=export_csv, inputs=[table_state], outputs=outputs)
    export_api_btn.click(fn=export_api_template, inputs=[table_state], outputs=outputs)

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    demo.launch()
