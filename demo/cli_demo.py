#!/usr/bin/env python3
"""
Interactive CLI demo for the ERP assistant.

Runs the intent engine against in-memory repositories so customers,
users and products can be created, queried and changed from the terminal.
"""
import logging
import os
import sys

# Imports assume PYTHONPATH=src is set (e.g., PYTHONPATH=src python demo/cli_demo.py)
from erp_assistant.app import AssistantApp
from erp_assistant.config_loader import load_config_from_env
from erp_assistant.exceptions import AssistantError
from erp_assistant.intent import ContextData


def print_banner(name):
    """Print welcome banner."""
    print("\n" + "=" * 60)
    print(f"  {name} - Assistente ERP (demo interativa)")
    print("=" * 60)
    print("\nExemplos:")
    print("  • cadastrar cliente nome João CPF 12345678900")
    print("  • listar clientes")
    print("  • criar usuário nome Maria email maria@exemplo.com perfil gerente")
    print("  • atualizar estoque do produto Arroz para 40")
    print("\nDigite 'sair' para encerrar.")
    print("-" * 60 + "\n")


def print_reply(reply):
    """Print formatted reply."""
    status = "✅" if reply.success else "⚠️"
    print(f"\n{status} [{reply.source}] {reply.answer}")
    if reply.operation_id:
        print(f"🔖 Operação: {reply.operation_id}")
    if reply.latency_ms is not None:
        print(f"⚡ {reply.latency_ms}ms")
    print("-" * 60)


def main():
    """Main CLI loop."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config_from_env()
        app = AssistantApp(config)
        app.initialize()
    except Exception as e:
        print(f"\n❌ Failed to initialize assistant: {e}")
        print("Please check your environment variables and configuration.")
        print("Set ENABLE_FALLBACK=false to run without an LLM API key.")
        return 1

    ctx = ContextData(
        user_id=os.getenv("DEMO_USER_ID", "demo-user"),
        tenant_id=os.getenv("DEMO_TENANT_ID", "demo-tenant"),
        role=os.getenv("DEMO_ROLE", "admin"),
    )
    print_banner(config.assistant_name)

    while True:
        try:
            message = input("Você: ").strip()

            if not message:
                continue

            if message.lower() in ["sair", "quit", "exit", "q"]:
                print("\n👋 Até logo!\n")
                break

            try:
                print_reply(app.chat(message, ctx))
            except AssistantError as e:
                print(f"\n❌ Erro: {e}")
                print("-" * 60)

        except KeyboardInterrupt:
            print("\n\n👋 Interrompido. Até logo!\n")
            break
        except EOFError:
            print("\n\n👋 Até logo!\n")
            break

    app.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
