ZOO_CSS = """
:root {
  color-scheme: light;
  --bg: #f3f6f1;
  --surface: #ffffff;
  --surface-2: #f7f9f5;
  --border: #dbe3d6;
  --text: #1c2a19;
  --muted: #5f6f5a;
  --brand: #2d5a27;
  --brand-dark: #1f3f1c;
  --brand-soft: #e6f0e3;
  --good: #2f8f3a;
  --danger: #b42318;
  --warning: #a15c07;
  --info: #1d4f91;
  --radius: 14px;
  --shadow: 0 10px 30px rgba(20, 40, 18, 0.10);
  --shadow-soft: 0 4px 14px rgba(20, 40, 18, 0.08);
}

* { box-sizing: border-box; }

body {
  margin: 0;
  font-family: "Inter", "Segoe UI", "Helvetica Neue", sans-serif;
  color: var(--text);
  background: var(--bg);
  min-height: 100vh;
}

.page { max-width: 1200px; margin: 0 auto; padding: 24px; display: grid; gap: 24px; }
.page-narrow { max-width: 760px; }

.card {
  background: var(--surface);
  border: 1px solid var(--border);
  border-radius: var(--radius);
  box-shadow: var(--shadow-soft);
  padding: 20px;
}

.grid-2 { display: grid; grid-template-columns: repeat(2, minmax(0, 1fr)); gap: 24px; }
.grid-3 { display: grid; grid-template-columns: repeat(3, minmax(0, 1fr)); gap: 16px; }

h1, h2, h3 { margin: 0 0 6px; letter-spacing: -0.01em; }
h1 { font-size: 26px; }
h2 { font-size: 20px; }
h3 { font-size: 16px; }

.meta { color: var(--muted); font-size: 13px; }
.eyebrow { text-transform: uppercase; letter-spacing: 0.2em; font-size: 11px; color: var(--muted); }

.section-head {
  display: flex;
  align-items: center;
  justify-content: space-between;
  gap: 12px;
  flex-wrap: wrap;
  margin-bottom: 16px;
}

.navbar {
  background: var(--surface);
  border-bottom: 1px solid var(--border);
  padding: 12px 24px;
  display: flex;
  align-items: center;
  justify-content: space-between;
  position: sticky;
  top: 0;
  z-index: 20;
}

.brand { display: flex; align-items: center; gap: 12px; cursor: pointer; }
.brand-mark {
  width: 40px; height: 40px; border-radius: 10px;
  background: var(--brand); color: #fff;
  display: flex; align-items: center; justify-content: center; font-weight: 700;
}
.brand-title { color: var(--brand); font-weight: 600; font-size: 17px; }
.nav-actions { display: flex; align-items: center; gap: 10px; position: relative; }

.icon-btn {
  position: relative;
  border: 1px solid transparent;
  background: transparent;
  border-radius: 10px;
  padding: 8px 10px;
  cursor: pointer;
  color: var(--muted);
  font-size: 14px;
}
.icon-btn:hover { background: var(--surface-2); }
.dot { position: absolute; top: 6px; right: 6px; width: 8px; height: 8px; border-radius: 50%; background: var(--danger); }

.menu {
  position: absolute;
  right: 0;
  top: calc(100% + 8px);
  width: 240px;
  background: var(--surface);
  border: 1px solid var(--border);
  border-radius: 12px;
  box-shadow: var(--shadow);
  padding: 6px;
  display: grid;
}
.menu-item {
  text-align: left; border: 0; background: transparent; padding: 10px 12px;
  border-radius: 8px; cursor: pointer; font-size: 14px; color: var(--text);
}
.menu-item:hover { background: var(--brand-soft); }
.menu-sep { height: 1px; background: var(--border); margin: 6px 0; }

.avatar {
  width: 36px; height: 36px; border-radius: 50%;
  background: var(--brand); color: #fff;
  display: inline-flex; align-items: center; justify-content: center;
  font-size: 13px; font-weight: 600; flex-shrink: 0;
}
.avatar.muted { background: #e2e8dd; color: var(--muted); }

.btn {
  border: 1px solid var(--border);
  background: var(--surface);
  padding: 9px 16px;
  border-radius: 10px;
  cursor: pointer;
  font-size: 14px;
  font-weight: 600;
  color: var(--text);
  transition: background 0.15s ease, box-shadow 0.15s ease;
}
.btn:hover { box-shadow: var(--shadow-soft); }
.btn.primary { background: var(--brand); border-color: var(--brand); color: #fff; }
.btn.primary:hover { background: var(--brand-dark); }
.btn.ghost { background: transparent; border-color: transparent; color: var(--muted); }
.btn.block { width: 100%; }
.btn[disabled] { opacity: 0.55; cursor: not-allowed; box-shadow: none; }

.pill, .tag {
  display: inline-flex; align-items: center; padding: 3px 10px;
  border-radius: 999px; font-size: 12px; font-weight: 600; border: 1px solid transparent;
}
.pill-success { background: #e7f6ec; color: #17603a; border-color: #a9dfbc; }
.pill-warning { background: #fff3e0; color: var(--warning); border-color: #f7cf97; }
.pill-danger { background: #fdecea; color: var(--danger); border-color: #f5b5ae; }
.pill-info { background: #e8f0fc; color: var(--info); border-color: #b4cdf0; }
.pill-muted { background: #eef1ec; color: var(--muted); border-color: #d9dfd5; }
.tag-safety { background: #fdf0ef; color: var(--danger); }
.tag-cleaning { background: #edf3fc; color: var(--info); }
.tag-repair { background: #fdf3e7; color: var(--warning); }

.list { display: grid; gap: 12px; }

.incident-row {
  display: flex; gap: 14px; padding: 14px; border: 1px solid var(--border);
  border-radius: 12px; cursor: pointer; background: var(--surface);
}
.incident-row:hover { box-shadow: var(--shadow-soft); }
.thumb { width: 80px; height: 80px; border-radius: 10px; object-fit: cover; background: var(--surface-2); flex-shrink: 0; }
.thumb-empty { display: flex; align-items: center; justify-content: center; color: var(--muted); font-size: 11px; }
.row-head { display: flex; align-items: flex-start; justify-content: space-between; gap: 8px; margin-bottom: 6px; }
.row-meta { display: flex; align-items: center; gap: 8px; margin-bottom: 6px; }
.clamp { display: -webkit-box; -webkit-line-clamp: 2; -webkit-box-orient: vertical; overflow: hidden; font-size: 14px; color: var(--muted); margin: 0; }

.incident-card { border: 1px solid var(--border); border-radius: 12px; overflow: hidden; background: var(--surface); cursor: pointer; }
.incident-card:hover { box-shadow: var(--shadow-soft); }
.incident-card .cover { position: relative; height: 180px; background: var(--surface-2); }
.incident-card .cover img { width: 100%; height: 100%; object-fit: cover; }
.incident-card .cover .pill { position: absolute; top: 10px; right: 10px; }
.incident-card .body { padding: 14px; }
.incident-card.resolved { opacity: 0.8; }

.hero-image { width: 100%; max-height: 420px; object-fit: cover; background: var(--surface-2); display: block; }
.detail-meta { display: grid; grid-template-columns: repeat(3, minmax(0, 1fr)); gap: 16px; }
.notice { background: #fff8e6; border: 1px solid #f3d48c; border-radius: 12px; padding: 14px; color: #6d4c06; }
.resolved-badge { display: inline-flex; align-items: center; gap: 8px; padding: 9px 16px; border-radius: 10px; background: #e7f6ec; color: #17603a; font-weight: 600; }

.map {
  position: relative; height: 460px; border-radius: 12px; border: 2px solid var(--border); overflow: hidden;
  background: linear-gradient(135deg, #eef7ea, #dcefd5);
}
.pin {
  position: absolute; transform: translate(-50%, -50%); width: 26px; height: 26px;
  border-radius: 50%; border: 3px solid #fff; box-shadow: var(--shadow-soft); cursor: default;
}
.pin.good { background: #22a447; }
.pin.issue { background: #e0362b; }
.pin-label {
  position: absolute; bottom: calc(100% + 6px); left: 50%; transform: translateX(-50%);
  background: #1c2a19; color: #fff; padding: 3px 8px; border-radius: 6px; font-size: 12px; white-space: nowrap;
}
.legend { display: flex; gap: 20px; margin-top: 12px; }
.legend span { display: inline-flex; align-items: center; gap: 6px; font-size: 13px; color: var(--muted); }
.legend i { width: 12px; height: 12px; border-radius: 50%; display: inline-block; }

.form { display: grid; gap: 16px; }
.field { display: grid; gap: 6px; }
.label { font-size: 13px; font-weight: 600; color: var(--muted); }
.error-text { font-size: 12px; color: var(--danger); }
.input, .textarea, .select {
  width: 100%; padding: 10px 12px; border-radius: 10px; border: 1px solid var(--border);
  background: var(--surface); font-size: 14px; color: var(--text); font-family: inherit;
}
.input:focus, .textarea:focus, .select:focus { outline: none; border-color: var(--brand); box-shadow: 0 0 0 3px rgba(45, 90, 39, 0.15); }
.input[disabled] { background: var(--surface-2); color: var(--muted); }
.textarea { min-height: 110px; resize: vertical; }
.dropzone { border: 2px dashed var(--border); border-radius: 12px; padding: 20px; text-align: center; background: var(--surface-2); }
.form-actions { display: flex; gap: 10px; justify-content: flex-end; flex-wrap: wrap; }
.success-panel { display: grid; justify-items: center; gap: 8px; padding: 48px 0; text-align: center; }

.toggle-row { display: flex; align-items: center; justify-content: space-between; gap: 16px; padding: 10px 0; border-bottom: 1px solid var(--border); }
.toggle-row:last-child { border-bottom: 0; }

.modal {
  position: fixed; inset: 0; background: rgba(12, 20, 10, 0.5);
  display: flex; align-items: center; justify-content: center; padding: 16px; z-index: 50;
}
.modal-card { width: min(960px, 96vw); background: var(--surface); border-radius: var(--radius); box-shadow: var(--shadow); display: flex; flex-direction: column; }
.modal-card.small { width: min(640px, 96vw); }
.modal-head { display: flex; align-items: center; justify-content: space-between; padding: 16px 20px; border-bottom: 1px solid var(--border); }
.modal-body { padding: 20px; display: grid; gap: 16px; }
.modal-foot { padding: 14px 20px; border-top: 1px solid var(--border); display: flex; justify-content: flex-end; gap: 10px; }

.inbox { display: flex; height: 560px; }
.inbox-list { width: 320px; border-right: 1px solid var(--border); display: flex; flex-direction: column; }
.inbox-tools { padding: 14px; display: grid; gap: 10px; border-bottom: 1px solid var(--border); }
.inbox-items { overflow-y: auto; flex: 1; }
.conv {
  width: 100%; display: flex; gap: 10px; text-align: left; padding: 12px 14px;
  border: 0; border-bottom: 1px solid #eef1ec; background: transparent; cursor: pointer;
}
.conv:hover { background: var(--surface-2); }
.conv.active { background: var(--brand-soft); }
.conv-name { font-size: 14px; font-weight: 600; }
.conv-preview { font-size: 13px; color: var(--muted); white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }
.thread { flex: 1; display: flex; flex-direction: column; min-width: 0; }
.thread-head { padding: 14px 20px; border-bottom: 1px solid var(--border); display: flex; align-items: center; gap: 10px; }
.thread-body { flex: 1; overflow-y: auto; padding: 20px; display: grid; gap: 12px; align-content: start; }
.bubble-row { display: flex; }
.bubble-row.mine { justify-content: flex-end; }
.bubble { max-width: 70%; padding: 9px 14px; border-radius: 14px; background: #eef1ec; font-size: 14px; }
.bubble-row.mine .bubble { background: var(--brand); color: #fff; }
.bubble-time { font-size: 11px; color: var(--muted); margin-top: 4px; }
.reply { display: flex; gap: 8px; padding: 12px; border-top: 1px solid var(--border); align-items: flex-end; }
.reply .textarea { min-height: 44px; }
.empty { flex: 1; display: flex; align-items: center; justify-content: center; color: var(--muted); font-size: 14px; }

.results { border: 1px solid var(--border); border-radius: 10px; max-height: 240px; overflow-y: auto; }
.result { width: 100%; display: flex; gap: 10px; align-items: center; padding: 10px; border: 0; border-bottom: 1px solid #eef1ec; background: var(--surface); text-align: left; cursor: pointer; }
.result:hover { background: var(--surface-2); }
.chip { display: flex; align-items: center; gap: 10px; padding: 10px; background: var(--surface-2); border-radius: 10px; }

.people { display: grid; grid-template-columns: repeat(auto-fill, minmax(260px, 1fr)); gap: 16px; }
.person { display: grid; gap: 10px; }
.person-head { display: flex; gap: 12px; align-items: center; }
.link { color: var(--brand); text-decoration: none; font-weight: 600; font-size: 13px; }
.link:hover { text-decoration: underline; }

.table { width: 100%; border-collapse: collapse; font-size: 14px; }
.table th, .table td { text-align: left; padding: 12px; border-bottom: 1px solid var(--border); }
.table th { font-size: 11px; letter-spacing: 0.12em; text-transform: uppercase; color: var(--muted); }
.table tr.today td { background: var(--brand-soft); }

.login-shell {
  min-height: 100vh; display: flex; align-items: center; justify-content: center; padding: 16px;
  background: linear-gradient(135deg, #2d5a27, #1a3316);
}
.login-card { width: min(420px, 100%); background: var(--surface); border-radius: var(--radius); box-shadow: var(--shadow); padding: 32px; display: grid; gap: 20px; }
.login-brand { display: grid; justify-items: center; gap: 6px; text-align: center; }
.login-foot { text-align: center; color: #fff; font-size: 13px; margin-top: 16px; }

.toasts { position: fixed; right: 20px; bottom: 20px; display: grid; gap: 10px; z-index: 80; }
.toast { min-width: 260px; padding: 12px 16px; border-radius: 10px; box-shadow: var(--shadow); background: var(--surface); border-left: 4px solid var(--info); font-size: 14px; }
.toast.success { border-left-color: #22a447; }
.toast.error { border-left-color: var(--danger); }

.placeholder { padding: 32px; text-align: center; color: var(--muted); }

@media (max-width: 900px) {
  .grid-2, .grid-3, .detail-meta { grid-template-columns: minmax(0, 1fr); }
  .inbox-list { width: 100%; }
  .inbox.has-thread .inbox-list { display: none; }
  .inbox:not(.has-thread) .thread { display: none; }
}
"""

UPLOAD_SCRIPT = (
    "document.addEventListener('change', function (event) {"
    "  var input = event.target;"
    "  if (!input || input.type !== 'file' || !input.dataset || !input.dataset.uploadKey) { return; }"
    "  var file = input.files && input.files[0];"
    "  if (!file) { return; }"
    "  var body = new FormData();"
    "  body.append('file', file);"
    "  input.setAttribute('data-upload-state', 'uploading');"
    "  fetch('/api/uploads/' + input.dataset.uploadKey, { method: 'POST', body: body })"
    "    .then(function (response) {"
    "      input.setAttribute('data-upload-state', response.ok ? 'staged' : 'failed');"
    "    })"
    "    .catch(function () { input.setAttribute('data-upload-state', 'failed'); });"
    "}, true);"
)
