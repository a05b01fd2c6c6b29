from __future__ import annotations

import html

_PAGE = """<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>{symbol} Paper Trader</title>
  <style>
    body {{ margin: 0; padding: 16px; font-family: system-ui, sans-serif; background: #050509; color: #f5f5f5; }}
    .grid {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(260px, 1fr)); gap: 16px; margin: 16px 0; }}
    .card {{ background: #15151b; border-radius: 12px; padding: 16px; }}
    .label {{ font-size: 11px; text-transform: uppercase; color: #9a9a9a; margin-bottom: 4px; }}
    .pos {{ color: #2ecc71; }}
    .neg {{ color: #e74c3c; }}
    table {{ width: 100%; border-collapse: collapse; font-size: 12px; }}
    th, td {{ padding: 4px 6px; border-bottom: 1px solid #222; text-align: left; }}
    input {{ width: 100%; padding: 6px; background: #0b0b11; color: #f5f5f5; border: 1px solid #444; }}
  </style>
</head>
<body>
  <h1>{symbol} Paper Trader</h1>
  <div id="cards">Loading...</div>
  <div class="card"><div class="label">Trades</div><div id="trades">No trades yet.</div></div>
  <div class="card" style="margin-top: 16px;">
    <div class="label">Relays</div>
    <input id="relay-url" type="text" placeholder="https://example.com/hook" />
    <button id="add-relay">Add Relay</button>
    <div id="relays">Loading relays...</div>
  </div>
  <script>
    const fmt = (n) => (n == null ? "-" : Number(n).toFixed(2));
    const cls = (v) => (v > 0 ? "pos" : v < 0 ? "neg" : "");
    const esc = (s) => String(s).replace(/[&<>"']/g, (c) => "&#" + c.charCodeAt(0) + ";");

    async function relayCall(method, url) {{
      const res = await fetch("/relays", {{
        method, headers: {{ "Content-Type": "application/json" }}, body: JSON.stringify({{ url }})
      }});
      return res.json();
    }}

    function renderStatus(s) {{
      const p = s.pnl || {{}}, pos = s.position || {{}}, a = s.anchors || {{}};
      document.getElementById("cards").innerHTML = `<div class="grid">
        <div class="card"><div class="label">FSM State</div>${{s.state}}</div>
        <div class="card"><div class="label">Position</div>
          <div>Side: ${{pos.side || "-"}}</div><div>Qty: ${{pos.qty ?? 0}}</div>
          <div>Entry Price: ${{pos.entryPrice ?? "-"}}</div></div>
        <div class="card"><div class="label">Anchors</div>
          <div>Buy Trigger: ${{a.buyEntryTrigger ?? "-"}}</div><div>Buy Stop: ${{a.buyStop ?? "-"}}</div>
          <div>Sell Trigger: ${{a.sellEntryTrigger ?? "-"}}</div><div>Sell Stop: ${{a.sellStop ?? "-"}}</div></div>
        <div class="card"><div class="label">P&amp;L</div>
          <div>Last Price: ${{p.lastPrice ?? "-"}}</div>
          <div class="${{cls(p.realizedPnl)}}">Realized: ${{fmt(p.realizedPnl)}}</div>
          <div class="${{cls(p.unrealizedPnl)}}">Unrealized: ${{fmt(p.unrealizedPnl)}}</div>
          <div class="${{cls(p.totalPnl)}}">Total: ${{fmt(p.totalPnl)}}</div>
          <div>Trades: ${{p.tradeCount ?? 0}}</div></div></div>`;
      const trades = (p.trades || []).slice().reverse();
      document.getElementById("trades").innerHTML = trades.length ? `<table>
        <tr><th>Time</th><th>Type</th><th>Side</th><th>Qty</th><th>Price</th><th>P&amp;L</th></tr>
        ${{trades.map((t) => `<tr><td>${{new Date(t.ts).toLocaleString()}}</td><td>${{t.type}}</td>
          <td>${{t.side}}</td><td>${{t.qty}}</td><td>${{t.price}}</td>
          <td class="${{cls(t.pnl || 0)}}">${{t.pnl != null ? fmt(t.pnl) : "-"}}</td></tr>`).join("")}}
        </table>` : "No trades yet.";
    }}

    function renderRelays(data) {{
      const list = (data && data.relays) || [];
      const host = document.getElementById("relays");
      if (!list.length) {{ host.textContent = "No relays registered."; return; }}
      host.innerHTML = list.map((u) => `<div>${{esc(u)}} <button data-url="${{esc(u)}}">Remove</button></div>`).join("");
      host.querySelectorAll("button").forEach((b) => b.addEventListener("click", async () => {{
        renderRelays(await relayCall("DELETE", b.getAttribute("data-url")));
      }}));
    }}

    async function refresh() {{
      try {{
        const [status, relays] = await Promise.all([
          fetch("/status").then((r) => r.json()), fetch("/relays").then((r) => r.json())
        ]);
        renderStatus(status);
        renderRelays(relays);
      }} catch (e) {{
        document.getElementById("cards").textContent = "Error loading status: " + e;
      }}
    }}

    document.getElementById("add-relay").addEventListener("click", async () => {{
      const input = document.getElementById("relay-url");
      const url = input.value.trim();
      if (!url) return;
      renderRelays(await relayCall("POST", url));
      input.value = "";
    }});
    refresh();
    setInterval(refresh, 2000);
  </script>
</body>
</html>
"""


def render_dashboard(symbol: str) -> str:
    return _PAGE.format(symbol=html.escape(symbol))
